"""Keepsake API Router - aggregates all API routes."""

from fastapi import APIRouter

from keepsake.api import onboard, session, token

# Main API router - all routes will be prefixed with /api
api_router = APIRouter(prefix="/api")

api_router.include_router(onboard.router)
api_router.include_router(token.router)
api_router.include_router(session.router)
