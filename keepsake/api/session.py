"""Session-authenticated project endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from keepsake.api.deps import get_project_service, get_session_claims
from keepsake.schemas.project import CurrentSessionResponse, OkResponse
from keepsake.services.project import ProjectService
from keepsake.services.session import SessionClaims

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])


@router.get("/session/current", response_model=CurrentSessionResponse)
async def get_current_session(
    claims: SessionClaims = Depends(get_session_claims),
    service: ProjectService = Depends(get_project_service),
) -> CurrentSessionResponse:
    """Return the authenticated project and its most recent interview session."""
    latest = await service.get_latest_session(claims.project_id)
    return CurrentSessionResponse(
        project_id=claims.project_id,
        session_id=latest.id if latest else None,
        transcript_id=latest.transcript_id if latest else None,
    )


@router.post("/project/delete", response_model=OkResponse)
async def delete_project(
    claims: SessionClaims = Depends(get_session_claims),
    service: ProjectService = Depends(get_project_service),
) -> OkResponse:
    """Mark the authenticated project for deletion."""
    if not await service.mark_delete_pending(claims.project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    return OkResponse(ok=True)
