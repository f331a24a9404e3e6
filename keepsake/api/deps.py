"""Shared FastAPI dependencies for session-authenticated routes."""

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from keepsake.core import get_db, settings
from keepsake.services.access_token import AccessTokenService
from keepsake.services.project import ProjectService
from keepsake.services.session import SessionClaims, SessionSigner

logger = logging.getLogger(__name__)


def get_signer(request: Request) -> SessionSigner:
    """The process-wide signer built at application creation."""
    return request.app.state.session_signer


def get_access_token_service(
    db: AsyncSession = Depends(get_db),
    signer: SessionSigner = Depends(get_signer),
) -> AccessTokenService:
    """Dependency to get access token service."""
    return AccessTokenService(db, signer, retention_days=settings.retention_days)


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    """Dependency to get project service."""
    return ProjectService(db)


def get_session_claims(
    request: Request,
    signer: SessionSigner = Depends(get_signer),
) -> SessionClaims:
    """Verify the session cookie; 401 when it is absent or invalid."""
    cookie = request.cookies.get(settings.session_cookie_name)
    claims = signer.verify(cookie)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return claims
