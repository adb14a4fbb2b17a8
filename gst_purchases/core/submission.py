from datetime import date
from typing import Any, List, Optional, Protocol, Union
import logging
from gst_purchases.core.config import Settings, settings as default_settings
from gst_purchases.core.tax import compute_breakdown, is_home_state, parse_number, round_money
from gst_purchases.core.narration import build_narration
from gst_purchases.core.dates import to_canonical
from gst_purchases.core.reconciliation import prefill_draft
from gst_purchases.schemas.draft import LastEntry, LineItemSelection, PurchaseDraft, TaxBreakdown
from gst_purchases.schemas.item import ItemMasterItem
from gst_purchases.schemas.purchase import (
    PurchaseCreate, PurchaseEntry, PurchaseItemPayload, PurchaseUpdate,
)
from gst_purchases.schemas.supplier import Supplier

logger = logging.getLogger(__name__)

class PurchaseCommands(Protocol):
    async def add_purchase(self, payload: PurchaseCreate) -> PurchaseEntry: ...
    async def update_purchase(self, payload: PurchaseUpdate) -> PurchaseEntry: ...

class PartSearch(Protocol):
    def search(self, query: str = "", supplier_id: Optional[int] = None) -> List[ItemMasterItem]: ...

class PurchaseSubmissionError(Exception):
    """The command layer rejected a purchase. The draft is left as it was."""

def build_create_payload(
    draft: PurchaseDraft,
    breakdown: TaxBreakdown,
    narration: str,
    part: Optional[LineItemSelection] = None,
    status: str = default_settings.PURCHASE_STATUS,
) -> PurchaseCreate:
    basic_value = round_money(draft.assessable)
    items = []
    if part is not None:
        items.append(PurchaseItemPayload(
            part_no=part.part_no or "",
            description=part.description,
            qty=1,
            price=basic_value,
            amount=basic_value,
        ))

    return PurchaseCreate(
        supplier_id=draft.supplier_id,
        invoice_no=draft.invoice_no,
        date=to_canonical(draft.invoice_date),
        entry_date=f"{draft.entry_date} 00:00:00" if draft.entry_date else None,
        gst_rate=draft.gst_rate or 0.0,
        basic_value=basic_value,
        sgst=round_money(breakdown.sgst),
        cgst=round_money(breakdown.cgst),
        igst=round_money(breakdown.igst),
        invoice_value=round_money(breakdown.invoice_value),
        tds_value=round_money(breakdown.tds),
        narration=narration,
        status=status,
        items=items,
    )

def build_update_payload(
    record_id: int,
    draft: PurchaseDraft,
    breakdown: TaxBreakdown,
    narration: str,
    status: str = default_settings.PURCHASE_STATUS,
) -> PurchaseUpdate:
    # Items are left out so the stored ones stay untouched
    return PurchaseUpdate(
        id=record_id,
        supplier_id=draft.supplier_id,
        invoice_no=draft.invoice_no,
        date=to_canonical(draft.invoice_date),
        entry_date=f"{draft.entry_date} 00:00:00",
        gst_rate=draft.gst_rate or 0.0,
        basic_value=round_money(draft.assessable),
        sgst=round_money(breakdown.sgst),
        cgst=round_money(breakdown.cgst),
        igst=round_money(breakdown.igst),
        invoice_value=round_money(breakdown.invoice_value),
        tds_value=round_money(breakdown.tds),
        narration=narration,
        status=status,
    )

class PurchaseEntrySession:
    """
    State of one purchase entry form.

    Holds the mutable draft and the transient part selection. Everything
    derived from them (tax breakdown, auto narration) is recomputed on each
    read. Pass ``initial`` to open the session in edit mode.
    """

    def __init__(
        self,
        commands: PurchaseCommands,
        suppliers: Optional[List[Supplier]] = None,
        item_master: Optional[PartSearch] = None,
        config: Optional[Settings] = None,
        initial: Optional[PurchaseEntry] = None,
    ):
        self.commands = commands
        self.suppliers: List[Supplier] = list(suppliers or [])
        self.item_master = item_master
        self.config = config or default_settings
        self.draft = PurchaseDraft()
        self.supplier_search = ""
        self.part: Optional[LineItemSelection] = None
        self.part_query = ""
        self.last_entry: Optional[LastEntry] = None
        self.pending = False
        self.initial: Optional[PurchaseEntry] = None
        if initial is not None:
            self.load(initial)

    # Derived state

    @property
    def selected_supplier(self) -> Optional[Supplier]:
        if self.draft.supplier_id is None:
            return None
        return next((s for s in self.suppliers if s.id == self.draft.supplier_id), None)

    @property
    def is_home_state(self) -> bool:
        supplier = self.selected_supplier
        return is_home_state(supplier.gst_no if supplier else None, self.config.HOME_STATE_CODE)

    @property
    def breakdown(self) -> TaxBreakdown:
        supplier = self.selected_supplier
        return compute_breakdown(
            supplier.tax_profile() if supplier else None,
            self.draft.gst_rate,
            self.draft.assessable,
            self.draft.difference,
            self.config.HOME_STATE_CODE,
        )

    def auto_narration(self) -> str:
        supplier = self.selected_supplier
        return build_narration(
            self.part.description if self.part else self.part_query,
            supplier.name if supplier else None,
            self.draft.invoice_no,
            self.draft.invoice_date,
            tds=self.breakdown.tds,
            tds_flag=bool(supplier and supplier.tds_flag),
            tds_rate=supplier.tds_rate if supplier else None,
        )

    @property
    def narration(self) -> str:
        if self.draft.narration_touched:
            return self.draft.narration
        return self.auto_narration()

    @property
    def is_editing(self) -> bool:
        return self.initial is not None

    @property
    def can_submit(self) -> bool:
        if self.pending or not self.draft.supplier_id:
            return False
        return self.is_editing or self.part is not None

    # Field setters (raw form input)

    def set_entry_date(self, value: str):
        self.draft.entry_date = value or ""

    def set_invoice_no(self, value: str):
        self.draft.invoice_no = value or ""

    def set_invoice_date(self, value: str):
        self.draft.invoice_date = value or ""

    def set_gst_rate(self, raw: Any):
        self.draft.gst_rate = parse_number(raw)

    def set_assessable(self, raw: Any):
        self.draft.assessable = parse_number(raw)

    def set_difference(self, raw: Any):
        self.draft.difference = parse_number(raw)

    def set_narration(self, text: str):
        self.draft.narration = text or ""
        self.draft.narration_touched = True

    def set_suppliers(self, suppliers: List[Supplier]):
        self.suppliers = list(suppliers)
        if self.draft.supplier_id is not None and not self.supplier_search:
            supplier = self.selected_supplier
            self.supplier_search = supplier.name if supplier else ""

    def select_supplier(self, supplier: Union[Supplier, int]):
        if isinstance(supplier, int):
            supplier = next((s for s in self.suppliers if s.id == supplier), None)
            if supplier is None:
                logger.warning("Supplier selection ignored: not in the loaded list")
                return
        elif all(s.id != supplier.id for s in self.suppliers):
            self.suppliers.append(supplier)
        self.draft.supplier_id = supplier.id
        self.supplier_search = supplier.name
        # Part belongs to the previous supplier's catalog
        self.part = None
        self.part_query = ""

    def search_parts(self, query: Optional[str] = None) -> List[ItemMasterItem]:
        if self.item_master is None:
            return []
        q = self.part_query if query is None else query
        return self.item_master.search(q, supplier_id=self.draft.supplier_id or None)

    def select_part(self, item: ItemMasterItem):
        self.part = LineItemSelection(id=item.id, part_no=item.part_no or "", description=item.description)
        self.part_query = f"{item.part_no or '-'} — {item.description}"
        if item.gst_percent is not None and item.gst_percent > 0:
            self.draft.gst_rate = item.gst_percent

    def set_part_query(self, text: str):
        self.part_query = text or ""

    # Lifecycle

    def reset(self):
        self.draft = PurchaseDraft()
        self.supplier_search = ""
        self.part = None
        self.part_query = ""
        self.initial = None

    def _clear_after_create(self):
        # Entry date carries over to the next entry
        self.draft = PurchaseDraft(entry_date=self.draft.entry_date)
        self.supplier_search = ""
        self.part = None
        self.part_query = ""

    def load(self, record: PurchaseEntry, today: Optional[date] = None):
        """Prefill the form from a stored purchase for editing."""
        self.initial = record
        try:
            prefilled = prefill_draft(record, self.suppliers, today=today)
            self.supplier_search = prefilled.supplier_search
            self.draft = PurchaseDraft(**prefilled.model_dump(exclude={"supplier_search"}))
            self.part = None
            self.part_query = ""
        except Exception:
            logger.exception(f"Prefill failed for purchase {record.id}; using blank form")
            self.draft = PurchaseDraft()
            self.supplier_search = ""
            self.part = None
            self.part_query = ""

    def duplicate_last_entry(self) -> bool:
        if self.last_entry is None:
            return False
        last = self.last_entry
        self.draft.supplier_id = last.supplier_id
        self.supplier_search = last.supplier_search
        self.draft.gst_rate = last.gst_rate
        self.part = last.part.model_copy() if last.part else None
        self.part_query = last.part_query
        return True

    async def submit(self) -> Optional[PurchaseEntry]:
        if self.pending:
            logger.warning("Submit ignored: a submission is already in flight")
            return None
        if not self.draft.supplier_id:
            logger.warning("Submit ignored: no supplier selected")
            return None

        breakdown = self.breakdown
        narration = self.narration
        logger.debug(
            f"Submitting purchase: supplier={self.draft.supplier_id} home_state={self.is_home_state} "
            f"breakdown={breakdown.model_dump()}"
        )

        self.pending = True
        try:
            if self.initial is not None:
                payload = build_update_payload(
                    self.initial.id, self.draft, breakdown, narration, self.config.PURCHASE_STATUS
                )
                saved = await self.commands.update_purchase(payload)
                self.initial = saved
                logger.info(f"Purchase {saved.id} updated via entry form")
                return saved

            payload = build_create_payload(
                self.draft, breakdown, narration, self.part, self.config.PURCHASE_STATUS
            )
            snapshot = LastEntry(
                supplier_id=self.draft.supplier_id,
                supplier_search=self.supplier_search,
                gst_rate=self.draft.gst_rate,
                part=self.part.model_copy() if self.part else None,
                part_query=self.part_query,
            )
            saved = await self.commands.add_purchase(payload)
            self.last_entry = snapshot
            self._clear_after_create()
            logger.info(f"Purchase {saved.id} created via entry form")
            return saved
        except Exception as e:
            logger.error(f"Purchase submission failed: {e}")
            raise PurchaseSubmissionError(str(e)) from e
        finally:
            self.pending = False
