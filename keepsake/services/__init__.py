"""Keepsake services."""

from keepsake.services.access_token import (
    AccessTokenService,
    CreatedProject,
    ExchangeResult,
    generate_project_token,
)
from keepsake.services.project import ProjectService
from keepsake.services.session import SessionClaims, SessionSigner

__all__ = [
    "AccessTokenService",
    "CreatedProject",
    "ExchangeResult",
    "ProjectService",
    "SessionClaims",
    "SessionSigner",
    "generate_project_token",
]
