from fastapi import APIRouter, HTTPException, Query
from typing import Optional
import logging
from gst_purchases.db.memory import store, RecordNotFound
from gst_purchases.schemas.supplier import Page, Supplier, SupplierCreate, SupplierUpdate

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/suppliers", response_model=Page[Supplier])
async def get_suppliers(
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    name_filter: Optional[str] = Query(None),
):
    return store.get_suppliers(page=page, page_size=page_size, name_filter=name_filter)

@router.get("/suppliers/{supplier_id}", response_model=Supplier)
async def get_supplier(supplier_id: int):
    try:
        return store.get_supplier(supplier_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/suppliers", response_model=Supplier)
async def add_supplier(payload: SupplierCreate):
    return store.add_supplier(payload)

@router.put("/suppliers/{supplier_id}", response_model=Supplier)
async def update_supplier(supplier_id: int, payload: SupplierUpdate):
    if payload.id != supplier_id:
        raise HTTPException(status_code=400, detail="Supplier id mismatch")
    try:
        return store.update_supplier(payload)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.delete("/suppliers/{supplier_id}")
async def delete_supplier(supplier_id: int):
    if not store.delete_supplier(supplier_id):
        raise HTTPException(status_code=404, detail=f"Supplier {supplier_id} not found")
    logger.info(f"Supplier deleted: {supplier_id}")
    return {"deleted": True}
