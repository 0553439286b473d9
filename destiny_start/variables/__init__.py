"""External variable store: path primitives, command scripts, clients, schema detection."""
