"""Onboarding API endpoint - creates a project and its shareable link."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from keepsake.api.deps import get_access_token_service
from keepsake.core import PersistenceError, settings
from keepsake.core.request_utils import get_request_origin
from keepsake.schemas.project import OnboardResponse, OwnerMetadata
from keepsake.services.access_token import AccessTokenService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["onboarding"])


def _validation_message(error: ValidationError) -> str:
    """Client-facing message for the first invalid onboarding field."""
    for detail in error.errors():
        if detail["loc"] and detail["loc"][0] == "name":
            return "Name is required"
    return "Invalid onboarding details"


@router.post(
    "/onboard",
    response_model=OnboardResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "Missing name or invalid details"}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": OwnerMetadata.model_json_schema()}},
        }
    },
)
async def onboard(
    request: Request,
    service: AccessTokenService = Depends(get_access_token_service),
) -> OnboardResponse | JSONResponse:
    """Create a project and return its one-time share URL.

    The share URL is the only place the plaintext token is ever returned.
    """
    try:
        data = OwnerMetadata.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(
            {"error": "Invalid JSON body"}, status_code=status.HTTP_400_BAD_REQUEST
        )
    except ValidationError as e:
        return JSONResponse(
            {"error": _validation_message(e)}, status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        created = await service.create_project_and_token(data)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create project",
        ) from e

    origin = get_request_origin(request, settings.public_base_url)
    return OnboardResponse(
        project_id=created.project_id,
        share_url=f"{origin}/t/{created.token}",
    )
