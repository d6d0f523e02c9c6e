# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Membership Roster Service
=========================
Stores member records in a key-value store, exposes CRUD endpoints, and runs
a periodic expiry sweep that emails each member once when their membership
is about to end.

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.controllers import member_controller, sweep_controller, system_controller
from app.core.config import settings
from app.core.dependencies import get_record_store, get_sweep_service
from app.core.logging import get_logger
from app.middleware import MetricsMiddleware, RequestIDMiddleware
from app.runtime.periodic import start_sweep_timer, stop_sweep_timer
from app.schemas import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    store = get_record_store()
    if hasattr(store, "ensure_schema"):
        try:
            store.ensure_schema()
        except Exception:
            logger.warning("Could not create member_records table — DB may not be ready yet")
    if settings.SWEEP_ENABLED:
        start_sweep_timer(
            application,
            get_sweep_service(),
            interval_seconds=settings.SWEEP_INTERVAL_SECONDS,
            wait_first=settings.SWEEP_WAIT_FIRST,
            logger=logger,
        )
    else:
        logger.info("Expiry sweep timer disabled (SWEEP_ENABLED=false)")
    yield
    await stop_sweep_timer(application, logger)
    if hasattr(store, "dispose"):
        store.dispose()
    logger.info("Roster service shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Membership Roster Service",
    description="Member CRUD over a key-value store plus a daily expiry-reminder sweep.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS", "DELETE"],
    allow_headers=["Content-Type"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Global exception handler ─────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(sweep_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
