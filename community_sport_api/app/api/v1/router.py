"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers (programs, FAQs,
appointments, authentication and roles) under a unified prefix.  When
a new domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import appointments, auth, faqs, programs, users

router = APIRouter()

router.include_router(programs.router, prefix="/programs", tags=["programs"])
router.include_router(faqs.router, prefix="/faqs", tags=["faqs"])
router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
