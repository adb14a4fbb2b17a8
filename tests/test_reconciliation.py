import pytest
from datetime import date
from gst_purchases.core.reconciliation import prefill_draft, reconcile_difference
from gst_purchases.core.submission import build_create_payload
from gst_purchases.core.tax import compute_breakdown
from gst_purchases.schemas.draft import PurchaseDraft
from gst_purchases.schemas.purchase import PurchaseEntry
from gst_purchases.schemas.supplier import Supplier

acme = Supplier(id=7, name="Acme Traders", gst_no="33ABCDE1234F1Z5")

def make_record(**overrides) -> PurchaseEntry:
    data = dict(
        id=1, supplier_id=7, invoice_no="INV-1", date="2024-04-05",
        entry_date="2024-04-06 10:15:00", gst_rate=18, basic_value=1000,
        sgst=90, cgst=90, igst=0, invoice_value=1182.5, tds_value=0,
        narration="Brake pad purchased from Acme Traders Invoice no INV-1 / 05-04-24",
        status="uploaded",
    )
    data.update(overrides)
    return PurchaseEntry(**data)

def test_difference_is_recovered():
    assert reconcile_difference(make_record()) == 2.5
    assert reconcile_difference(make_record(invoice_value=1179.99)) == -0.01
    assert reconcile_difference(make_record(invoice_value=1180)) == 0

def test_prefill_fields():
    draft = prefill_draft(make_record(), [acme])
    assert draft.entry_date == "2024-04-06"
    assert draft.supplier_id == 7
    assert draft.supplier_search == "Acme Traders"
    assert draft.invoice_no == "INV-1"
    assert draft.invoice_date == "05-04-24"
    assert draft.gst_rate == 18
    assert draft.assessable == 1000
    assert draft.difference == 2.5
    assert draft.narration_touched is True

def test_prefill_tolerates_missing_supplier_list():
    draft = prefill_draft(make_record(), None)
    assert draft.supplier_search == ""
    assert draft.supplier_id == 7

def test_prefill_without_narration_resumes_auto_text():
    draft = prefill_draft(make_record(narration=None), [acme])
    assert draft.narration == ""
    assert draft.narration_touched is False

def test_prefill_blank_entry_date_defaults_to_today():
    draft = prefill_draft(make_record(entry_date=""), [acme], today=date(2025, 1, 2))
    assert draft.entry_date == "2025-01-02"

def test_prefill_passes_odd_dates_through():
    draft = prefill_draft(make_record(date="5/4/2024"), [acme])
    assert draft.invoice_date == "5/4/2024"

def test_round_trip_recovers_difference():
    cases = [(1000, 18, 0), (1234.56, 12, 3.21), (99.99, 5, -0.45), (10.005, 28, 0.1)]
    for assessable, rate, difference in cases:
        draft = PurchaseDraft(
            supplier_id=7, invoice_no="RT", invoice_date="05-04-24",
            gst_rate=rate, assessable=assessable, difference=difference,
        )
        breakdown = compute_breakdown(acme.tax_profile(), rate, assessable, difference, "33")
        payload = build_create_payload(draft, breakdown, "rt")
        record = PurchaseEntry(id=99, entry_date=payload.entry_date, **payload.model_dump(exclude={"items", "entry_date"}))
        assert reconcile_difference(record) == pytest.approx(difference, abs=0.011)
