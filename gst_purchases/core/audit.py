from abc import ABC, abstractmethod
from typing import List, Optional
from gst_purchases.schemas.audit import AuditLogEntry
import logging

logger = logging.getLogger(__name__)

class AuditRepository(ABC):
    @abstractmethod
    def save(self, entry: AuditLogEntry):
        pass

    @abstractmethod
    def get_all(self) -> List[AuditLogEntry]:
        pass

class InMemoryAuditRepository(AuditRepository):
    def __init__(self):
        self._storage: List[AuditLogEntry] = []

    def save(self, entry: AuditLogEntry):
        # Append-only
        self._storage.append(entry)
        logger.info(f"Audit Logged: {entry.model_dump_json()}")

    def get_all(self) -> List[AuditLogEntry]:
        return list(self._storage)

    def find(self, action_type: Optional[str] = None, limit: int = 100) -> List[AuditLogEntry]:
        rows = [e for e in self._storage if action_type is None or e.action_type == action_type]
        return rows[-limit:]

# Global Accessor
audit_repo = InMemoryAuditRepository()
