"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from delivery_scheduler.api.v1.api import api_router
from delivery_scheduler.core.config import settings
from delivery_scheduler.db import session as db_session
from delivery_scheduler.db.base import Base
from delivery_scheduler.db.seed import ensure_default_rules
from delivery_scheduler.services.errors import SchedulingError

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(SchedulingError)
def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def startup() -> None:
    logger.info("Starting %s (env=%s, timezone=%s)", settings.app_name, settings.app_env, settings.app_timezone)
    Base.metadata.create_all(bind=db_session.engine)
    if not settings.seed_default_rules:
        logger.info("[BOOTSTRAP] default rule seeding disabled")
        return
    with db_session.SessionLocal() as session:
        try:
            seeded = ensure_default_rules(session)
            logger.info("[BOOTSTRAP] default rules seeded: %s", "yes" if seeded else "no (tables not empty)")
        except Exception:
            session.rollback()
            logger.exception("[BOOTSTRAP] Seeding default rules failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
