"""
Application package.

The API is organised by layer: ``core`` (configuration, logging,
database, security, errors and the per‑app context), ``schemas``,
``services`` and versioned routers under ``api``.
"""
