from datetime import date
from typing import Iterable, Optional
from gst_purchases.schemas.purchase import PurchaseEntry
from gst_purchases.schemas.supplier import Supplier
from gst_purchases.schemas.draft import PrefilledDraft
from gst_purchases.core.dates import to_compact
from gst_purchases.core.tax import round_money

# AUTHORITATIVE EDIT-MODE RECONCILIATION – DO NOT DUPLICATE
# Inverse of the tax engine: turns a stored purchase back into form state.

def reconcile_difference(record: PurchaseEntry) -> float:
    """
    The manual difference is not stored. Recover it as whatever is left of the
    invoice value after the basic value and GST.
    """
    gst_total = record.cgst + record.sgst + record.igst
    return round_money(record.invoice_value - (record.basic_value + gst_total))

def prefill_draft(
    record: PurchaseEntry,
    suppliers: Optional[Iterable[Supplier]] = None,
    today: Optional[date] = None,
) -> PrefilledDraft:
    """
    Build an editable draft from a stored purchase.

    The supplier name is looked up best-effort; an empty or not yet loaded
    supplier list just leaves it blank. The line item is never reconstructed,
    the editor has to reselect a part for item-level changes.
    """
    entry_date = (record.entry_date or "")[:10]
    if not entry_date:
        entry_date = (today or date.today()).isoformat()

    supplier_name = next(
        (s.name for s in (suppliers or []) if s.id == record.supplier_id), ""
    )
    narration = record.narration or ""

    return PrefilledDraft(
        entry_date=entry_date,
        supplier_id=record.supplier_id,
        supplier_search=supplier_name,
        invoice_no=record.invoice_no,
        invoice_date=to_compact(record.date),
        gst_rate=record.gst_rate,
        assessable=record.basic_value,
        difference=reconcile_difference(record),
        narration=narration,
        narration_touched=bool(narration),
    )
