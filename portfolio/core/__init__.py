"""
Core utilities shared across the portfolio package.

This package hosts configuration, logging setup and small formatting helpers.
Repositories, services and routers depend on these primitives instead of
reading os.environ directly.
"""
