"""FastAPI application entry point."""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import get_settings
from app.core.logging import clear_log_context, get_logger, log_event, set_log_context

logger = get_logger(__name__)

app = FastAPI(
    title="EZSOP API",
    description="SOP authoring, knowledge collection and manager readiness for small regulated businesses",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind a fresh logging context to every request."""
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    clear_log_context()
    set_log_context(request_id=request_id)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_unhandled_error")
        raise
    response.headers["X-Request-Id"] = request_id
    log_event(
        logger,
        logging.DEBUG,
        "request_complete",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
    )
    return response


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# Include v1 API router
app.include_router(api_router, prefix="/v1", tags=["v1"])
