from pydantic import BaseModel, field_validator
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

class Page(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    page_size: int

class SupplierTaxProfile(BaseModel):
    """The slice of a supplier the tax engine reads."""
    gst_no: Optional[str] = None
    tds_flag: bool = False
    tds_rate: Optional[float] = None

class Supplier(SupplierTaxProfile):
    id: int
    name: str
    state_code: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None

    def tax_profile(self) -> SupplierTaxProfile:
        return SupplierTaxProfile(gst_no=self.gst_no, tds_flag=self.tds_flag, tds_rate=self.tds_rate)

class SupplierCreate(BaseModel):
    name: str
    gst_no: Optional[str] = None
    state_code: Optional[str] = None
    tds_flag: bool = False
    tds_rate: Optional[float] = None
    contact: Optional[str] = None
    email: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Supplier name is required')
        return v.strip()

    @field_validator('gst_no', mode='before')
    @classmethod
    def normalize_gst_no(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v

class SupplierUpdate(BaseModel):
    id: int
    name: Optional[str] = None
    gst_no: Optional[str] = None
    state_code: Optional[str] = None
    tds_flag: Optional[bool] = None
    tds_rate: Optional[float] = None
    contact: Optional[str] = None
    email: Optional[str] = None
