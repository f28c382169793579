# draftroom/web/api.py
# Application FastAPI : routes /api/*, sondes, gestion d'erreurs
# Lancement :
#   python -m uvicorn draftroom.web.api:app --host 0.0.0.0 --port 8000

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from draftroom import health
from draftroom.config import settings
from draftroom.errors import DraftroomError, NotFoundError, StoreError, ValidationError
from draftroom.logging_config import setup_logging
from draftroom.schemas import ErrorBody, ErrorResponse
from draftroom.seed import run_bootstrap
from draftroom.storage import Storage
from draftroom.web import routes

log = logging.getLogger(__name__)

APP_TITLE = "Draftroom: LoL team manager"

STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    StoreError: 500,
}


def _error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return ErrorResponse(error=ErrorBody(code=code, message=message, details=details or {})).model_dump()


def _request_fields(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Erreurs pydantic → [{"field": "championId", "message": "..."}]."""
    fields = []
    for err in exc.errors():
        loc = list(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        fields.append({
            "field": ".".join(str(part) for part in loc) or "body",
            "message": err.get("msg", "invalid value"),
        })
    return fields


# --------------------------- Handlers ----------------------------
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = _request_fields(exc)
    log.info("Invalid request %s %s: %s", request.method, request.url.path, fields)
    return JSONResponse(
        status_code=400,
        content=_error_payload("VALIDATION_ERROR", "Invalid request", {"fields": fields}),
    )


async def handle_draftroom_error(request: Request, exc: DraftroomError) -> JSONResponse:
    status = next((s for cls, s in STATUS_BY_ERROR.items() if isinstance(exc, cls)), 500)
    return JSONResponse(
        status_code=status,
        content=_error_payload(exc.code, exc.message, exc.details),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Le détail reste dans les logs, jamais dans la réponse
    log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=_error_payload("INTERNAL_ERROR", "Internal server error"),
    )


# --------------------------- Lifespan ----------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(level=settings.LOG_LEVEL)
    storage: Storage = app.state.storage
    storage.create_schema()
    if settings.SEED_CHAMPIONS:
        await run_bootstrap(storage)
    else:
        log.info("Champion seed disabled (SEED_CHAMPIONS=false)")
    log.info("🚀 Draftroom API ready")
    yield
    log.info("Draftroom API stopped")


# --------------------------- FastAPI -----------------------------
def create_app(storage: Optional[Storage] = None) -> FastAPI:
    app = FastAPI(title=APP_TITLE, lifespan=lifespan)
    app.state.storage = storage or Storage()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS.split(","),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(DraftroomError, handle_draftroom_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health.router)
    app.include_router(routes.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("draftroom.web.api:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
