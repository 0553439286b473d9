"""File-based JSON storage.

Data layout:
  data/
    config.json          App settings (variable store connection, write
                         strategy, message id, prompt template)
    start_presets.json   Preset blob: {"presets": [...], "lastUsedPreset": ...}

The preset blob is only ever read and written whole, through
destiny_start.presets.store.PresetStore.

Config: get_config() returns defaults merged with stored values, then
VARIABLE_STORE_URL / VARIABLE_STORE_API_KEY from the environment.
update_config() applies partial updates — variable_store merged
key-by-key, scalars overwritten.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    preset_store,
    presets_path,
)

from .config import (  # noqa: F401
    WRITE_STRATEGIES,
    get_config,
    update_config,
)
