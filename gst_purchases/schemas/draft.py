from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
from datetime import date
import math

def _today() -> str:
    return date.today().isoformat()

def lenient_number(raw: Any) -> Optional[float]:
    """Blank, garbage or non-finite input yields None, which the tax engine reads as 0."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        # float() also takes "1_000", form input does not
        if not text or "_" in text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None

class LineItemSelection(BaseModel):
    id: Optional[int] = None
    part_no: Optional[str] = None
    description: str

class PurchaseDraft(BaseModel):
    entry_date: str = Field(default_factory=_today)  # YYYY-MM-DD
    supplier_id: Optional[int] = None
    invoice_no: str = ""
    invoice_date: str = ""  # DD-MM-YY, as typed
    gst_rate: Optional[float] = None
    assessable: Optional[float] = None
    difference: Optional[float] = None
    narration: str = ""
    narration_touched: bool = False

    @field_validator('gst_rate', 'assessable', 'difference', mode='before')
    @classmethod
    def coerce_numeric(cls, v):
        return lenient_number(v)

class PrefilledDraft(PurchaseDraft):
    supplier_search: str = ""

class LastEntry(BaseModel):
    supplier_id: Optional[int] = None
    supplier_search: str = ""
    gst_rate: Optional[float] = None
    part: Optional[LineItemSelection] = None
    part_query: str = ""

class TaxBreakdown(BaseModel):
    gst_amount: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    igst: float = 0.0
    tds: float = 0.0
    invoice_value: float = 0.0

class DraftPreviewRequest(BaseModel):
    """Form state posted by a client for live computation or quick entry."""
    draft: PurchaseDraft = Field(default_factory=PurchaseDraft)
    part: Optional[LineItemSelection] = None
    part_query: str = ""

class DraftState(BaseModel):
    draft: PurchaseDraft
    supplier_search: str = ""
    is_home_state: bool = False
    breakdown: TaxBreakdown = Field(default_factory=TaxBreakdown)
    narration: str = ""
