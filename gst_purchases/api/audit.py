from fastapi import APIRouter, Query
from typing import List, Optional
from gst_purchases.core.audit import audit_repo
from gst_purchases.schemas.audit import AuditLogEntry

router = APIRouter()

@router.get("/audit/logs", response_model=List[AuditLogEntry])
async def get_audit_logs(action_type: Optional[str] = Query(None), limit: int = Query(100, ge=1, le=1000)):
    return audit_repo.find(action_type=action_type, limit=limit)
