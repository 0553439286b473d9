"""Character presets: storage, import/export, legacy migration, draft helpers."""
