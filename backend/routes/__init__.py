"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, config, connection check), drafts
(new draft, rule summary), presets
(CRUD, last-used marker, apply/match, import/export), and sync (commit a
character to the variable store, schema detection, prompt rendering).
"""

from fastapi import APIRouter

from .drafts import router as drafts_router
from .presets import router as presets_router
from .settings import router as settings_router
from .sync import router as sync_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(drafts_router)
router.include_router(presets_router)
router.include_router(sync_router)
