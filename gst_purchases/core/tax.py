from typing import Any, Optional
from gst_purchases.schemas.supplier import SupplierTaxProfile
from gst_purchases.schemas.draft import TaxBreakdown, lenient_number

# AUTHORITATIVE TAX ENGINE
# Pure functions only. Called on every form change; never cache the result.

def parse_number(raw: Any) -> Optional[float]:
    """Lenient coercion of a raw form value. Blank, garbage, NaN and infinity yield None."""
    return lenient_number(raw)

def round_money(value: Optional[float]) -> float:
    return round(value or 0.0, 2)

def is_home_state(gst_no: Optional[str], home_state_code: str) -> bool:
    if not gst_no or not home_state_code:
        return False
    return gst_no.startswith(home_state_code)

def compute_breakdown(
    profile: Optional[SupplierTaxProfile],
    gst_rate: Optional[float],
    assessable: Optional[float],
    difference: Optional[float],
    home_state_code: str,
) -> TaxBreakdown:
    """
    Derive the GST split, TDS and invoice total for one purchase line.

    GST is charged on the assessable value only; the manual difference is added
    to the total afterwards. TDS is reported but never deducted from the total.
    Nothing is rounded here, see round_money for payload construction.
    """
    rate = gst_rate or 0.0
    base = assessable or 0.0
    diff = difference or 0.0
    home = is_home_state(profile.gst_no if profile else None, home_state_code)

    gst_amount = base * (rate / 100)
    cgst = gst_amount / 2 if rate > 0 and home else 0.0
    sgst = gst_amount / 2 if rate > 0 and home else 0.0
    igst = gst_amount if rate > 0 and not home else 0.0

    tds = 0.0
    if profile is not None and profile.tds_flag:
        tds = base * ((profile.tds_rate or 0.0) / 100)

    return TaxBreakdown(
        gst_amount=gst_amount,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        tds=tds,
        invoice_value=base + cgst + sgst + igst + diff,
    )
