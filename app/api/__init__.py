"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import (
    ai_gateway,
    auth,
    knowledge,
    onboarding,
    profile,
    readiness,
    recommendations,
    session,
    sop_wizard,
    sops,
)

router = APIRouter()

# Session, route gate and auth pass-through
router.include_router(session.router)
router.include_router(auth.router)

# Onboarding and business profile
router.include_router(onboarding.router)
router.include_router(profile.router)

# SOP library and build wizard
router.include_router(sops.router)
router.include_router(sop_wizard.router)
router.include_router(recommendations.router)

# Knowledge checklist, base and interview
router.include_router(knowledge.router)

# Manager readiness
router.include_router(readiness.router)

# AI proxy
router.include_router(ai_gateway.router)
