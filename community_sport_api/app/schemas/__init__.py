"""
Pydantic schema definitions for API payloads and stored documents.

Schemas are grouped per domain (programs, appointments, FAQs, users
and search filters).
"""
