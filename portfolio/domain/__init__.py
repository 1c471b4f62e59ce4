"""Pure domain rules (no storage, no web)."""
