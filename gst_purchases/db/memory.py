from datetime import datetime
from itertools import count
from typing import Dict, List, Optional
import logging
from gst_purchases.core.config import settings
from gst_purchases.schemas.supplier import Page, Supplier, SupplierCreate, SupplierUpdate
from gst_purchases.schemas.item import ItemMasterItem, ItemMasterCreate, ItemMasterUpdate
from gst_purchases.schemas.purchase import (
    PurchaseCreate, PurchaseUpdate, PurchaseEntry, PurchaseFilters,
    PurchaseItem, PurchaseItemPayload,
)
from gst_purchases.schemas.report import ReportSummary, PurchasesBySupplier

logger = logging.getLogger(__name__)

# AUTHORITATIVE COMMAND LAYER – DO NOT DUPLICATE
# In-memory stand-in for the persistence engine. Command names and paging
# semantics follow the desktop app's native commands.

class RecordNotFound(LookupError):
    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id

def _page_bounds(page: Optional[int], page_size: Optional[int]):
    page = max(page or 1, 1)
    page_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    return page, page_size, (page - 1) * page_size

def _in_period(value: str, date_from: Optional[str], date_to: Optional[str]) -> bool:
    if date_from and value < date_from:
        return False
    if date_to and value > date_to:
        return False
    return True

class ItemMaster:
    """Local catalog of parts, searched by the entry form."""

    def __init__(self):
        self._items: List[ItemMasterItem] = []

    def _next_id(self) -> int:
        return max((it.id for it in self._items), default=0) + 1

    def all(self) -> List[ItemMasterItem]:
        return list(self._items)

    def add(self, item: ItemMasterCreate) -> ItemMasterItem:
        created = ItemMasterItem(id=self._next_id(), **item.model_dump())
        self._items.append(created)
        return created

    def update(self, item_id: int, patch: ItemMasterUpdate) -> ItemMasterItem:
        for index, it in enumerate(self._items):
            if it.id == item_id:
                changes = patch.model_dump(exclude_unset=True)
                self._items[index] = it.model_copy(update=changes)
                return self._items[index]
        raise RecordNotFound("Item", item_id)

    def remove(self, item_id: int) -> bool:
        before = len(self._items)
        self._items = [it for it in self._items if it.id != item_id]
        return len(self._items) < before

    def search(self, query: str = "", supplier_id: Optional[int] = None) -> List[ItemMasterItem]:
        q = (query or "").strip().lower()
        found = [
            it for it in self._items
            if not q
            or q in (it.part_no or "").lower()
            or q in it.description.lower()
        ]
        if supplier_id:
            found = [it for it in found if it.supplier_id == supplier_id]
        return found

class InMemoryStore:
    def __init__(self):
        self.suppliers: Dict[int, Supplier] = {}
        self.purchases: Dict[int, PurchaseEntry] = {}
        self.items: Dict[int, PurchaseItem] = {}
        self.item_master = ItemMaster()
        self._supplier_ids = count(1)
        self._purchase_ids = count(1)
        self._item_ids = count(1)

    # Suppliers

    def get_suppliers(self, page: Optional[int] = None, page_size: Optional[int] = None,
                      name_filter: Optional[str] = None) -> Page[Supplier]:
        page, page_size, offset = _page_bounds(page, page_size)
        needle = (name_filter or "").lower()
        rows = sorted(
            (s for s in self.suppliers.values() if needle in s.name.lower()),
            key=lambda s: s.name,
        )
        return Page[Supplier](data=rows[offset:offset + page_size], total=len(rows),
                              page=page, page_size=page_size)

    def get_supplier(self, supplier_id: int) -> Supplier:
        try:
            return self.suppliers[supplier_id]
        except KeyError:
            raise RecordNotFound("Supplier", supplier_id)

    def add_supplier(self, payload: SupplierCreate) -> Supplier:
        supplier = Supplier(id=next(self._supplier_ids), **payload.model_dump())
        self.suppliers[supplier.id] = supplier
        logger.info(f"Supplier added: {supplier.id} {supplier.name}")
        return supplier

    def update_supplier(self, payload: SupplierUpdate) -> Supplier:
        current = self.get_supplier(payload.id)
        changes = payload.model_dump(exclude={"id"}, exclude_none=True)
        self.suppliers[payload.id] = current.model_copy(update=changes)
        return self.suppliers[payload.id]

    def delete_supplier(self, supplier_id: int) -> bool:
        return self.suppliers.pop(supplier_id, None) is not None

    # Purchases & items

    def get_purchases(self, filters: Optional[PurchaseFilters] = None, page: Optional[int] = None,
                      page_size: Optional[int] = None) -> Page[PurchaseEntry]:
        page, page_size, offset = _page_bounds(page, page_size)
        f = filters or PurchaseFilters()
        rows = []
        for p in self.purchases.values():
            if f.supplier_id is not None and p.supplier_id != f.supplier_id:
                continue
            if not _in_period(p.date, f.date_from, f.date_to):
                continue
            if f.gst_rate is not None and p.gst_rate != f.gst_rate:
                continue
            if f.invoice_no and f.invoice_no.lower() not in p.invoice_no.lower():
                continue
            if f.status and p.status != f.status:
                continue
            rows.append(p)
        rows.sort(key=lambda p: (p.entry_date, p.date, p.id), reverse=True)
        return Page[PurchaseEntry](data=rows[offset:offset + page_size], total=len(rows),
                                   page=page, page_size=page_size)

    def get_purchase(self, purchase_id: int) -> PurchaseEntry:
        try:
            return self.purchases[purchase_id]
        except KeyError:
            raise RecordNotFound("Purchase", purchase_id)

    def _insert_items(self, purchase_id: int, items: List[PurchaseItemPayload]):
        for it in items:
            item_id = next(self._item_ids)
            self.items[item_id] = PurchaseItem(
                id=item_id,
                purchase_id=purchase_id,
                part_no=it.part_no,
                description=it.description,
                qty=it.qty,
                unit=it.unit,
                price=it.price,
                amount=it.amount if it.amount is not None else it.qty * it.price,
            )

    def add_purchase(self, payload: PurchaseCreate) -> PurchaseEntry:
        purchase_id = next(self._purchase_ids)
        entry = PurchaseEntry(
            id=purchase_id,
            entry_date=payload.entry_date or datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            **payload.model_dump(exclude={"items", "entry_date"}),
        )
        self.purchases[purchase_id] = entry
        self._insert_items(purchase_id, payload.items)
        logger.info(f"Purchase added: {purchase_id} invoice={entry.invoice_no} items={len(payload.items)}")
        return entry

    def update_purchase(self, payload: PurchaseUpdate) -> PurchaseEntry:
        current = self.get_purchase(payload.id)
        changes = payload.model_dump(exclude={"id", "items"}, exclude_none=True)
        self.purchases[payload.id] = current.model_copy(update=changes)

        if payload.items is not None:
            self.items = {k: v for k, v in self.items.items() if v.purchase_id != payload.id}
            self._insert_items(payload.id, payload.items)

        logger.info(f"Purchase updated: {payload.id} fields={sorted(changes)}")
        return self.purchases[payload.id]

    def delete_purchase(self, purchase_id: int) -> bool:
        removed = self.purchases.pop(purchase_id, None) is not None
        if removed:
            self.items = {k: v for k, v in self.items.items() if v.purchase_id != purchase_id}
        return removed

    def get_items_by_purchase(self, purchase_id: int) -> List[PurchaseItem]:
        return sorted(
            (it for it in self.items.values() if it.purchase_id == purchase_id),
            key=lambda it: it.id,
        )

    def add_item(self, purchase_id: int, item: PurchaseItemPayload) -> bool:
        self.get_purchase(purchase_id)
        self._insert_items(purchase_id, [item])
        return True

    def update_item(self, item_id: int, item: PurchaseItemPayload) -> bool:
        current = self.items.get(item_id)
        if current is None:
            return False
        self.items[item_id] = current.model_copy(update={
            "part_no": item.part_no,
            "description": item.description,
            "qty": item.qty,
            "unit": item.unit,
            "price": item.price,
            "amount": item.amount if item.amount is not None else item.qty * item.price,
        })
        return True

    # Reports

    def _purchases_in(self, date_from: Optional[str], date_to: Optional[str]) -> List[PurchaseEntry]:
        return [p for p in self.purchases.values() if _in_period(p.date, date_from, date_to)]

    def get_report_summary(self, date_from: Optional[str] = None,
                           date_to: Optional[str] = None) -> ReportSummary:
        rows = self._purchases_in(date_from, date_to)
        ids = {p.id for p in rows}
        return ReportSummary(
            total_purchases=sum(p.invoice_value for p in rows),
            total_gst=sum(p.sgst + p.cgst + p.igst for p in rows),
            total_suppliers=len({p.supplier_id for p in rows}),
            total_items=sum(1 for it in self.items.values() if it.purchase_id in ids),
        )

    def get_purchases_by_supplier(self, date_from: Optional[str] = None,
                                  date_to: Optional[str] = None) -> List[PurchasesBySupplier]:
        totals: Dict[str, float] = {}
        for p in self._purchases_in(date_from, date_to):
            supplier = self.suppliers.get(p.supplier_id)
            if supplier is None:
                continue
            totals[supplier.name] = totals.get(supplier.name, 0.0) + p.invoice_value
        rows = [PurchasesBySupplier(supplier_name=k, total_purchases=v) for k, v in totals.items()]
        return sorted(rows, key=lambda r: -r.total_purchases)

    def export_purchases(self, date_from: Optional[str] = None,
                         date_to: Optional[str] = None) -> List[PurchaseEntry]:
        return sorted(self._purchases_in(date_from, date_to), key=lambda p: p.date, reverse=True)

class StorePurchaseCommands:
    """Async command facade used by the entry session."""

    def __init__(self, store: "InMemoryStore"):
        self.store = store

    async def add_purchase(self, payload: PurchaseCreate) -> PurchaseEntry:
        return self.store.add_purchase(payload)

    async def update_purchase(self, payload: PurchaseUpdate) -> PurchaseEntry:
        return self.store.update_purchase(payload)

# Global Accessor
store = InMemoryStore()
