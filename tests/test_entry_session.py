import asyncio
import pytest
from gst_purchases.core.submission import PurchaseEntrySession, PurchaseSubmissionError
from gst_purchases.db.memory import InMemoryStore, StorePurchaseCommands
from gst_purchases.schemas.item import ItemMasterCreate
from gst_purchases.schemas.supplier import SupplierCreate

def make_session():
    store = InMemoryStore()
    home = store.add_supplier(SupplierCreate(name="Chennai Spares", gst_no="33AAAAA0000A1Z5"))
    outside = store.add_supplier(SupplierCreate(name="Bangalore Motors", gst_no="29BBBBB1111B1Z5", tds_flag=True, tds_rate=2))
    store.item_master.add(ItemMasterCreate(part_no="BP-1", description="Brake pad", gst_percent=28, supplier_id=home.id))
    store.item_master.add(ItemMasterCreate(part_no="OF-2", description="Oil filter", gst_percent=18, supplier_id=outside.id))
    session = PurchaseEntrySession(
        StorePurchaseCommands(store),
        suppliers=store.get_suppliers().data,
        item_master=store.item_master,
    )
    return store, session, home, outside

class FailingCommands:
    async def add_purchase(self, payload):
        raise RuntimeError("database is locked")

    async def update_purchase(self, payload):
        raise RuntimeError("database is locked")

def test_live_breakdown_follows_inputs():
    _, session, home, outside = make_session()
    session.select_supplier(home)
    session.set_gst_rate("18")
    session.set_assessable("1000")
    assert session.breakdown.cgst == pytest.approx(90)
    assert session.breakdown.invoice_value == pytest.approx(1180)

    session.select_supplier(outside)
    assert session.breakdown.igst == pytest.approx(180)
    assert session.breakdown.tds == pytest.approx(20)
    assert session.breakdown.invoice_value == pytest.approx(1180)

def test_garbage_input_falls_back_to_zero():
    _, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_gst_rate("18")
    session.set_assessable("12abc")
    assert session.draft.assessable is None
    assert session.breakdown.invoice_value == 0

def test_selecting_supplier_clears_part():
    _, session, home, outside = make_session()
    session.select_supplier(home)
    session.select_part(session.search_parts("brake")[0])
    assert session.part is not None
    session.select_supplier(outside)
    assert session.part is None
    assert session.part_query == ""

def test_part_search_prefers_selected_supplier():
    _, session, home, _ = make_session()
    assert len(session.search_parts("")) == 2
    session.select_supplier(home)
    found = session.search_parts("")
    assert [p.part_no for p in found] == ["BP-1"]
    assert session.search_parts("filter") == []

def test_selecting_part_adopts_gst_rate():
    _, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_gst_rate(18)
    session.select_part(session.search_parts("BP")[0])
    assert session.draft.gst_rate == 28
    assert session.part_query == "BP-1 — Brake pad"

def test_narration_regenerates_until_edited():
    _, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_part_query("brake")
    session.set_invoice_no("A1")
    assert session.narration == "brake purchased from Chennai Spares Invoice no A1 / "
    session.set_invoice_date("05-04-24")
    assert session.narration.endswith("Invoice no A1 / 05-04-24")

    session.set_narration("Custom text")
    session.set_invoice_no("A2")
    session.set_assessable(50)
    assert session.narration == "Custom text"
    assert "A2" in session.auto_narration()

def test_narration_mentions_tds():
    _, session, _, outside = make_session()
    session.select_supplier(outside)
    session.set_assessable(1000)
    assert session.narration.endswith("TDS amounted 20.00 deducted for 2.00% Assessable value")

def test_unknown_supplier_uses_placeholders():
    _, session, _, _ = make_session()
    session.draft.supplier_id = 999
    assert session.selected_supplier is None
    assert session.narration.startswith("part purchased from supplier")

def test_create_submission_and_reset():
    store, session, home, _ = make_session()
    session.set_entry_date("2024-04-06")
    session.select_supplier(home)
    session.set_invoice_no("INV-10")
    session.set_invoice_date("05-04-24")
    session.select_part(session.search_parts("brake")[0])
    session.set_assessable("1,000")
    session.set_difference("0.5")
    assert session.can_submit

    saved = asyncio.run(session.submit())

    assert saved.date == "2024-04-05"
    assert saved.entry_date == "2024-04-06 00:00:00"
    assert saved.basic_value == 1000.0
    assert saved.cgst == 140.0
    assert saved.invoice_value == 1280.5
    assert saved.status == "uploaded"
    assert saved.narration.startswith("Brake pad purchased from Chennai Spares Invoice no INV-10")
    items = store.get_items_by_purchase(saved.id)
    assert len(items) == 1
    assert items[0].qty == 1
    assert items[0].price == 1000.0

    # Reset keeps only the entry date
    assert session.draft.entry_date == "2024-04-06"
    assert session.draft.supplier_id is None
    assert session.draft.invoice_no == ""
    assert session.draft.invoice_date == ""
    assert session.part is None
    assert session.draft.narration_touched is False

def test_create_without_part_sends_no_items():
    store, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_assessable(100)
    assert not session.can_submit
    saved = asyncio.run(session.submit())
    assert store.get_items_by_purchase(saved.id) == []

def test_duplicate_last_entry():
    _, session, home, _ = make_session()
    assert session.duplicate_last_entry() is False
    session.select_supplier(home)
    session.set_invoice_no("INV-1")
    session.set_invoice_date("01-01-25")
    session.select_part(session.search_parts("brake")[0])
    session.set_assessable(10)
    asyncio.run(session.submit())

    assert session.duplicate_last_entry() is True
    assert session.draft.supplier_id == home.id
    assert session.supplier_search == "Chennai Spares"
    assert session.draft.gst_rate == 28
    assert session.part.description == "Brake pad"
    assert session.draft.invoice_no == ""
    assert session.draft.invoice_date == ""

def test_failed_submission_keeps_draft():
    _, session, home, _ = make_session()
    session.commands = FailingCommands()
    session.select_supplier(home)
    session.set_invoice_no("INV-X")
    session.set_assessable(500)
    with pytest.raises(PurchaseSubmissionError):
        asyncio.run(session.submit())
    assert session.draft.invoice_no == "INV-X"
    assert session.draft.assessable == 500
    assert session.pending is False
    assert session.last_entry is None

def test_submit_is_blocked_while_pending():
    _, session, home, _ = make_session()
    calls = []

    class SlowCommands:
        def __init__(self):
            self.gate = asyncio.Event()

        async def add_purchase(self, payload):
            calls.append(payload)
            await self.gate.wait()
            return await StorePurchaseCommands(InMemoryStore()).add_purchase(payload)

    async def scenario():
        commands = SlowCommands()
        session.commands = commands
        session.select_supplier(home)
        session.set_assessable(10)
        first = asyncio.create_task(session.submit())
        await asyncio.sleep(0)
        assert session.pending is True
        assert session.can_submit is False
        second = await session.submit()
        commands.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert second is None
    assert first is not None
    assert len(calls) == 1
    assert session.pending is False

def test_edit_mode_update_keeps_items():
    store, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_invoice_no("E-1")
    session.set_invoice_date("05-04-24")
    session.select_part(session.search_parts("brake")[0])
    session.set_assessable(1000)
    session.set_difference(2)
    created = asyncio.run(session.submit())

    editor = PurchaseEntrySession(StorePurchaseCommands(store), suppliers=store.get_suppliers().data,
                                  initial=created)
    assert editor.is_editing
    assert editor.draft.difference == 2
    assert editor.draft.invoice_date == "05-04-24"
    assert editor.supplier_search == "Chennai Spares"
    assert editor.part is None
    assert editor.can_submit

    editor.set_assessable(2000)
    updated = asyncio.run(editor.submit())
    assert updated.id == created.id
    assert updated.basic_value == 2000
    assert updated.invoice_value == 2562.0
    # Stored narration was preserved verbatim
    assert updated.narration == created.narration
    assert len(store.get_items_by_purchase(created.id)) == 1

def test_prefill_failure_falls_back_to_blank(monkeypatch):
    store, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_assessable(10)
    record = asyncio.run(session.submit())

    def broken(*args, **kwargs):
        raise ValueError("bad record")

    monkeypatch.setattr("gst_purchases.core.submission.prefill_draft", broken)
    editor = PurchaseEntrySession(StorePurchaseCommands(store), initial=record)
    assert editor.is_editing
    assert editor.draft.supplier_id is None
    assert editor.draft.invoice_no == ""

def test_nan_input_never_reaches_the_store():
    store, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_gst_rate("18")
    session.set_assessable("nan")
    session.set_difference("inf")
    saved = asyncio.run(session.submit())
    assert saved.basic_value == 0
    assert saved.invoice_value == 0
    summary = store.get_report_summary()
    assert summary.total_purchases == 0
    assert summary.total_gst == 0

def test_supplier_name_fills_in_when_list_loads_late():
    store, session, home, _ = make_session()
    session.select_supplier(home)
    session.set_narration("kept")
    record = asyncio.run(session.submit())

    editor = PurchaseEntrySession(StorePurchaseCommands(store), initial=record)
    assert editor.supplier_search == ""
    assert editor.selected_supplier is None

    editor.set_suppliers(store.get_suppliers().data)
    assert editor.supplier_search == "Chennai Spares"
    assert editor.selected_supplier.id == home.id
