"""
Top-level package for the Edu-Learn API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``edu_learn_api.app.main:app``.
"""

__all__ = []
