# agency_crm/api/health.py
from __future__ import annotations
from fastapi import APIRouter, HTTPException
from typing import Dict, Any

from agency_crm.services import config
from agency_crm.store.db import ping

router = APIRouter(prefix="", tags=["Health"])

@router.get("/healthz")
def healthz() -> Dict[str, Any]:
    # App is up
    return {"status": "ok", "service": "agency-crm", "env": config.ENV}

@router.get("/readyz")
def readyz() -> Dict[str, Any]:
    # DB ping
    try:
        ping()
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"DB ping failed: {e}")
    return {"status": "ok", "db": "ok"}
