"""Health check, settings, and variable store connection check endpoints."""

import httpx
from fastapi import APIRouter, HTTPException

from backend import storage
from backend.variable_store import set_variable_store

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.post("/check-connection")
async def check_connection():
    """Quick readiness check against the configured variable store."""
    conn = storage.get_config()["variable_store"]
    if not conn["url"]:
        return {"ok": False, "reason": "no variable store configured"}
    headers: dict[str, str] = {}
    if conn["api_key"]:
        headers["Authorization"] = f"Bearer {conn['api_key']}"
    try:
        async with httpx.AsyncClient(timeout=5) as client:
            resp = await client.get(f"{conn['url'].rstrip('/')}/ready", headers=headers)
            resp.raise_for_status()
        return {"ok": bool(resp.json().get("ready"))}
    except (httpx.HTTPError, ValueError):
        return {"ok": False}


@router.get("/settings")
async def get_settings():
    """Get app settings (variable store connection, write strategy, prompt template)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update app settings (partial merge). Connection changes apply on next use."""
    try:
        config = storage.update_config(body)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if "variable_store" in body:
        set_variable_store(None)
    return config
