"""
Application package initializer.

The project is organised by layer: ``core`` (configuration, database,
security), ``schemas`` (pydantic payloads), ``services`` (business
rules) and ``api`` (versioned routers).
"""

from .main import app  # noqa: F401
