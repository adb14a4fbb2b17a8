from pydantic import BaseModel, Field
from typing import List, Optional

class PurchaseItemPayload(BaseModel):
    id: Optional[int] = None
    part_no: Optional[str] = None
    description: str
    qty: float
    unit: Optional[str] = None
    price: float
    amount: Optional[float] = None

    class Config:
        allow_inf_nan = False

class PurchaseItem(BaseModel):
    id: int
    purchase_id: int
    part_no: Optional[str] = None
    description: str
    qty: float
    unit: Optional[str] = None
    price: float
    amount: float

class PurchaseCreate(BaseModel):
    supplier_id: int
    invoice_no: str
    date: str  # YYYY-MM-DD
    entry_date: Optional[str] = None  # YYYY-MM-DD HH:MM:SS
    gst_rate: float
    basic_value: float
    sgst: float
    cgst: float
    igst: float
    invoice_value: float
    tds_value: float
    narration: Optional[str] = None
    status: str
    items: List[PurchaseItemPayload] = Field(default_factory=list)

    class Config:
        allow_inf_nan = False

class PurchaseUpdate(BaseModel):
    id: int
    supplier_id: Optional[int] = None
    invoice_no: Optional[str] = None
    date: Optional[str] = None
    entry_date: Optional[str] = None
    gst_rate: Optional[float] = None
    basic_value: Optional[float] = None
    sgst: Optional[float] = None
    cgst: Optional[float] = None
    igst: Optional[float] = None
    invoice_value: Optional[float] = None
    tds_value: Optional[float] = None
    narration: Optional[str] = None
    status: Optional[str] = None
    # If provided, replaces the stored items
    items: Optional[List[PurchaseItemPayload]] = None

    class Config:
        allow_inf_nan = False

class PurchaseEntry(BaseModel):
    id: int
    supplier_id: int
    invoice_no: str
    date: str
    entry_date: str
    gst_rate: float
    basic_value: float
    sgst: float
    cgst: float
    igst: float
    invoice_value: float
    tds_value: float
    narration: Optional[str] = None
    status: str

class PurchaseFilters(BaseModel):
    supplier_id: Optional[int] = None
    date_from: Optional[str] = None  # inclusive
    date_to: Optional[str] = None    # inclusive
    gst_rate: Optional[float] = None
    invoice_no: Optional[str] = None
    status: Optional[str] = None
