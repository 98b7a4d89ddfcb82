"""
Top‑level package for the Community Sport API.

All functionality lives in submodules under ``app``; the ASGI
application is ``community_sport_api.app.main:app``.
"""

__all__ = []
