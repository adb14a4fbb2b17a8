import logging
from fastapi import FastAPI
from gst_purchases.core.config import settings
from gst_purchases.core.middleware import AuditMiddleware
from gst_purchases.api import health, suppliers, items, purchases, reports, audit

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title=settings.PROJECT_NAME)
app.add_middleware(AuditMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(suppliers.router)
app.include_router(items.router)
app.include_router(purchases.router)
app.include_router(reports.router)
app.include_router(audit.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
