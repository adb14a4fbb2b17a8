from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import hashlib
from gst_purchases.core.audit import audit_repo
from gst_purchases.schemas.audit import AuditLogEntry, AuditStatus
import logging
from typing import Callable

logger = logging.getLogger(__name__)

_WRITE_VERBS = {"POST": "CREATE", "PUT": "UPDATE", "PATCH": "UPDATE", "DELETE": "DELETE"}

def resolve_action_type(path: str, method: str) -> str:
    if path.startswith("/health"):
        return "HEALTH_CHECK"
    if path.startswith("/audit"):
        return "AUDIT_READ"
    if path.endswith("/pdf"):
        return "PDF_DOWNLOAD"
    if path.startswith("/reports"):
        return "REPORT"
    if path == "/purchases/preview":
        return "PREVIEW"
    if path == "/purchases/entry":
        return "CREATE_PURCHASE"
    if path.startswith("/purchases") and path.endswith("/draft"):
        return "PREFILL"

    resource = None
    for prefix, name in (("/purchases", "PURCHASE"), ("/suppliers", "SUPPLIER"), ("/items", "ITEM")):
        if path.startswith(prefix):
            resource = name
            break
    if resource is None:
        return "UNKNOWN"
    verb = _WRITE_VERBS.get(method, "READ")
    return f"{verb}_{resource}"

class AuditMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        # 1. Capture Request Details
        endpoint = request.url.path
        method = request.method
        action_type = resolve_action_type(endpoint, method)
        actor = request.headers.get("X-Actor") or "system"

        # 2. Capture & Hash Input
        input_hash = None
        request_body_bytes = b""
        try:
            request_body_bytes = await request.body()
            # Always hash the body, even if empty, for determinism
            input_hash = hashlib.sha256(request_body_bytes).hexdigest()
        except Exception as e:
            logger.warning(f"Could not read request body for audit: {e}")

        # Re-inject body
        async def receive():
            return {"type": "http.request", "body": request_body_bytes}
        request._receive = receive

        # 3. Process Request
        response = None
        status = AuditStatus.FAILURE
        output_hash = None

        try:
            response = await call_next(request)
            if 200 <= response.status_code < 300:
                status = AuditStatus.SUCCESS

            # 4. Capture & Hash Output
            response_body_bytes = b""
            async for chunk in response.body_iterator:
                response_body_bytes += chunk

            output_hash = hashlib.sha256(response_body_bytes).hexdigest()

            # Reconstruct response
            response = Response(
                content=response_body_bytes,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type
            )
        finally:
            # 5. Log Event
            try:
                entry = AuditLogEntry(
                    endpoint=endpoint,
                    method=method,
                    action_type=action_type,
                    actor=actor,
                    input_hash=input_hash,
                    output_hash=output_hash,
                    status=status
                )
                audit_repo.save(entry)
            except Exception as log_error:
                logger.error(f"Audit Logging Failed: {log_error}")

        return response
