from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional
from gst_purchases.db.memory import store, RecordNotFound
from gst_purchases.schemas.item import ItemMasterItem, ItemMasterCreate, ItemMasterUpdate

router = APIRouter()

@router.get("/items", response_model=List[ItemMasterItem])
async def search_items(q: str = Query(""), supplier_id: Optional[int] = Query(None)):
    """Item-master search by part number or description, optionally for one supplier."""
    return store.item_master.search(q, supplier_id=supplier_id)

@router.post("/items", response_model=ItemMasterItem)
async def add_item(payload: ItemMasterCreate):
    return store.item_master.add(payload)

@router.put("/items/{item_id}", response_model=ItemMasterItem)
async def update_item(item_id: int, payload: ItemMasterUpdate):
    try:
        return store.item_master.update(item_id, payload)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.delete("/items/{item_id}")
async def remove_item(item_id: int):
    if not store.item_master.remove(item_id):
        raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
    return {"deleted": True}
