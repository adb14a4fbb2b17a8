from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional
import logging
from gst_purchases.core.config import settings
from gst_purchases.core.submission import PurchaseEntrySession, PurchaseSubmissionError
from gst_purchases.db.memory import store, StorePurchaseCommands, RecordNotFound
from gst_purchases.schemas.draft import DraftPreviewRequest, DraftState
from gst_purchases.schemas.purchase import (
    PurchaseCreate, PurchaseEntry, PurchaseFilters, PurchaseItem, PurchaseItemPayload, PurchaseUpdate,
)
from gst_purchases.schemas.supplier import Page

router = APIRouter()
logger = logging.getLogger(__name__)

def _session(request: Optional[DraftPreviewRequest] = None) -> PurchaseEntrySession:
    session = PurchaseEntrySession(
        StorePurchaseCommands(store),
        suppliers=list(store.suppliers.values()),
        item_master=store.item_master,
        config=settings,
    )
    if request is not None:
        session.draft = request.draft.model_copy()
        session.part = request.part
        session.part_query = request.part_query
        supplier = session.selected_supplier
        session.supplier_search = supplier.name if supplier else ""
    return session

def _state(session: PurchaseEntrySession) -> DraftState:
    return DraftState(
        draft=session.draft,
        supplier_search=session.supplier_search,
        is_home_state=session.is_home_state,
        breakdown=session.breakdown,
        narration=session.narration,
    )

@router.get("/purchases", response_model=Page[PurchaseEntry])
async def get_purchases(
    supplier_id: Optional[int] = Query(None),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    gst_rate: Optional[float] = Query(None),
    invoice_no: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
):
    filters = PurchaseFilters(
        supplier_id=supplier_id,
        date_from=date_from,
        date_to=date_to,
        gst_rate=gst_rate,
        invoice_no=invoice_no,
        status=status,
    )
    return store.get_purchases(filters, page=page, page_size=page_size)

@router.post("/purchases/preview", response_model=DraftState)
async def preview_purchase(request: DraftPreviewRequest):
    """
    Live computation for the entry form: GST split, TDS, invoice total and
    auto narration. Unknown suppliers fall back to placeholder text.
    """
    return _state(_session(request))

@router.post("/purchases/entry", response_model=PurchaseEntry)
async def submit_purchase_entry(request: DraftPreviewRequest):
    """Assemble the create payload from form state and store it."""
    if request.draft.supplier_id is None:
        raise HTTPException(status_code=400, detail="Supplier is required")
    if request.draft.supplier_id not in store.suppliers:
        raise HTTPException(status_code=404, detail=f"Supplier {request.draft.supplier_id} not found")

    session = _session(request)
    try:
        return await session.submit()
    except PurchaseSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/purchases", response_model=PurchaseEntry)
async def add_purchase(payload: PurchaseCreate):
    return store.add_purchase(payload)

@router.get("/purchases/{purchase_id}", response_model=PurchaseEntry)
async def get_purchase(purchase_id: int):
    try:
        return store.get_purchase(purchase_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.put("/purchases/{purchase_id}", response_model=PurchaseEntry)
async def update_purchase(purchase_id: int, payload: PurchaseUpdate):
    if payload.id != purchase_id:
        raise HTTPException(status_code=400, detail="Purchase id mismatch")
    try:
        return store.update_purchase(payload)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.delete("/purchases/{purchase_id}")
async def delete_purchase(purchase_id: int):
    if not store.delete_purchase(purchase_id):
        raise HTTPException(status_code=404, detail=f"Purchase {purchase_id} not found")
    logger.info(f"Purchase deleted: {purchase_id}")
    return {"deleted": True}

@router.get("/purchases/{purchase_id}/items", response_model=List[PurchaseItem])
async def get_items_by_purchase(purchase_id: int):
    return store.get_items_by_purchase(purchase_id)

@router.post("/purchases/{purchase_id}/items", response_model=List[PurchaseItem])
async def add_item(purchase_id: int, item: PurchaseItemPayload):
    try:
        store.add_item(purchase_id, item)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return store.get_items_by_purchase(purchase_id)

@router.put("/purchases/items/{item_id}", response_model=PurchaseItem)
async def update_item(item_id: int, item: PurchaseItemPayload):
    if not store.update_item(item_id, item):
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    return store.items[item_id]

@router.get("/purchases/{purchase_id}/draft", response_model=DraftState)
async def get_purchase_draft(purchase_id: int):
    """Edit-mode prefill of a stored purchase."""
    try:
        record = store.get_purchase(purchase_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    session = _session()
    session.load(record)
    return _state(session)
