"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.v1 import (
    applications,
    auth,
    conditions,
    evaluate,
    health,
    release_check,
    releases,
    users,
)

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Public device endpoint
api_router.include_router(
    release_check.router,
    prefix="/releases",
    tags=["release-check"],
)

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Users
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"],
)

# Applications
api_router.include_router(
    applications.router,
    prefix="/apps",
    tags=["applications"],
)

api_router.include_router(
    conditions.router,
    prefix="/apps/{app_id}/conditions",
    tags=["conditions"],
)

api_router.include_router(
    releases.router,
    prefix="/apps/{app_id}/releases",
    tags=["releases"],
)

# Evaluator
api_router.include_router(
    evaluate.router,
    prefix="/apps/{app_id}",
    tags=["evaluator"],
)
