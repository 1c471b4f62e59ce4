"""
High-level use cases for the portfolio.

Service modules orchestrate repositories/adapters (export naming, storage
diagnostics, update checks). Routers call these services instead of touching
the storage directly.
"""
