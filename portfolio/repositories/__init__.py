"""
Persistence adapters.

These modules encapsulate how data is stored/retrieved (JSON file, SQL table,
memory) and where the fallback projects come from. Services depend on the
repository instead of touching the storage directly.
"""
