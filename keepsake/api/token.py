"""Token exchange endpoint - trades a one-time share-link token for a session cookie."""

import json
import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from pydantic import ValidationError

from keepsake.api.deps import get_access_token_service
from keepsake.core import PersistenceError, settings
from keepsake.core.request_utils import get_client_ip
from keepsake.schemas.project import ExchangeRequest
from keepsake.services.access_token import AccessTokenService

logger = logging.getLogger(__name__)

INVALID_LINK_MESSAGE = "Invalid or expired link"

# Failed exchanges per client IP, to slow down token guessing
_exchange_failures: dict[str, list[float]] = defaultdict(list)
_EXCHANGE_WINDOW = 60  # 1-minute window
_last_sweep = 0.0


def _sweep_exchange_failures(now: float) -> None:
    """Forget clients whose failures have all left the window.

    Runs at most once per window.
    """
    global _last_sweep
    if now - _last_sweep < _EXCHANGE_WINDOW:
        return
    _last_sweep = now
    stale = [
        ip
        for ip, attempts in _exchange_failures.items()
        if not attempts or now - attempts[-1] >= _EXCHANGE_WINDOW
    ]
    for ip in stale:
        del _exchange_failures[ip]
    if stale:
        logger.debug(f"Dropped {len(stale)} idle exchange rate-limit entries")


def _check_exchange_rate_limit(client_ip: str) -> None:
    """Reject clients that have failed too many exchanges in the window."""
    now = time.monotonic()
    _sweep_exchange_failures(now)

    recent = [t for t in _exchange_failures.get(client_ip, ()) if now - t < _EXCHANGE_WINDOW]
    if not recent:
        _exchange_failures.pop(client_ip, None)
        return
    _exchange_failures[client_ip] = recent
    if len(recent) >= settings.exchange_rate_limit:
        logger.warning("Token exchange rate limit exceeded for %s", client_ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many attempts. Please try again later.",
        )


def _record_exchange_failure(client_ip: str) -> None:
    _exchange_failures[client_ip].append(time.monotonic())


async def _read_token(request: Request) -> str | None:
    """Token from a form post (the landing page) or a JSON body."""
    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
        form = await request.form()
        token = form.get("token")
        return token if isinstance(token, str) and token else None

    try:
        body = ExchangeRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return None
    return body.token or None


router = APIRouter(prefix="/token", tags=["token"])


@router.post(
    "/exchange",
    response_class=RedirectResponse,
    status_code=status.HTTP_303_SEE_OTHER,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing, invalid or expired token"},
        status.HTTP_429_TOO_MANY_REQUESTS: {"description": "Too many failed attempts"},
    },
)
async def exchange_token(
    request: Request,
    service: AccessTokenService = Depends(get_access_token_service),
) -> Response:
    """Exchange a share-link token for a session.

    On success the token is rotated (the link stops working), a session
    cookie is set and the browser is sent to the upload step.
    """
    client_ip = get_client_ip(request)
    _check_exchange_rate_limit(client_ip)

    token = await _read_token(request)
    if not token:
        return PlainTextResponse("token required", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        result = await service.exchange_token(token)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to open project",
        ) from e

    if not result.ok:
        _record_exchange_failure(client_ip)
        return PlainTextResponse(INVALID_LINK_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)

    response = RedirectResponse(
        url=f"/session/{result.project_id}/upload",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.session_credential or "",
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return response
