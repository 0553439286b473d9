"""The variable store used by the API, built from config on first use."""

import logging

from destiny_start.variables.store import HttpVariableStore, MemoryVariableStore, VariableStore

from backend import storage

logger = logging.getLogger(__name__)

_store: VariableStore | None = None


def set_variable_store(store: VariableStore | None) -> None:
    """Replace the active store. None rebuilds it from config on next use."""
    global _store
    _store = store


def variable_store() -> VariableStore:
    global _store
    if _store is None:
        conn = storage.get_config()["variable_store"]
        if conn["url"]:
            _store = HttpVariableStore(
                conn["url"], api_key=conn["api_key"], timeout=float(conn["timeout"])
            )
            logger.info("using variable store at %s", conn["url"])
        else:
            _store = MemoryVariableStore()
            logger.warning("no variable store url configured, using in-memory store")
    return _store
