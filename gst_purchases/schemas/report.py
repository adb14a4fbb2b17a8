from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class ReportSummary(BaseModel):
    total_purchases: float = 0.0
    total_gst: float = 0.0
    total_suppliers: int = 0
    total_items: int = 0

class PurchasesBySupplier(BaseModel):
    supplier_name: str
    total_purchases: float = 0.0

class ReportPeriod(BaseModel):
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.utcnow)

class PurchaseRegister(BaseModel):
    period: ReportPeriod
    summary: ReportSummary
    by_supplier: List[PurchasesBySupplier] = []
