from pydantic import BaseModel
from typing import Optional

class ItemMasterItem(BaseModel):
    id: int
    part_no: Optional[str] = None
    description: str
    gst_percent: Optional[float] = None
    supplier_id: Optional[int] = None
    active: bool = True

class ItemMasterCreate(BaseModel):
    part_no: Optional[str] = None
    description: str
    gst_percent: Optional[float] = None
    supplier_id: Optional[int] = None
    active: bool = True

class ItemMasterUpdate(BaseModel):
    part_no: Optional[str] = None
    description: Optional[str] = None
    gst_percent: Optional[float] = None
    supplier_id: Optional[int] = None
    active: Optional[bool] = None
