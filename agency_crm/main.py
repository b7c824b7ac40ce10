# agency_crm/main.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agency_crm.services import config
from agency_crm.services.errors import CRMError
from agency_crm.store.db import init_db
from agency_crm.utils.request_id import RequestIDMiddleware

# ── Import routers ──
from agency_crm.api import (
    agents_api,
    auth_api,
    clients_api,
    commissions_api,
    data_api,
    leads_api,
    messages_api,
    notifications_api,
    resources_api,
    users_api,
    health as health_api,
)

logger = logging.getLogger("agency_crm")


def configure_logging() -> None:
    """One root format for the process; leaves an existing configuration alone."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=config.LOG_LEVEL,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    logging.getLogger("agency_crm").setLevel(config.LOG_LEVEL)


configure_logging()

# ── App ──
app = FastAPI(title="Agency CRM", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


# ── Simulated network latency (SIMULATED_LATENCY_MS, default 0) ──
@app.middleware("http")
async def simulated_latency(request: Request, call_next: Callable):
    delay = config.SIMULATED_LATENCY_MS
    if delay > 0:
        await asyncio.sleep(delay / 1000)
    resp: Response = await call_next(request)
    return resp


# ── Error rendering ──
@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "InternalError", "message": "Internal server error", "detail": "Internal server error", "status_code": 500},
    )


# ── Startup: schema and demo data ──
@app.on_event("startup")
async def on_startup() -> None:
    init_db()
    logger.info("agency CRM started (env=%s)", config.ENV)


# ── Routers (each carries its own /api/... prefix) ──
app.include_router(auth_api.router)
app.include_router(users_api.router)
app.include_router(agents_api.router)
app.include_router(leads_api.router)
app.include_router(clients_api.router)
app.include_router(messages_api.router)
app.include_router(notifications_api.router)
app.include_router(commissions_api.router)
app.include_router(data_api.router)
app.include_router(resources_api.router)
app.include_router(health_api.router)     # /healthz, /readyz


@app.get("/")
def root() -> dict:
    return {"status": "OK", "docs": "/docs"}
