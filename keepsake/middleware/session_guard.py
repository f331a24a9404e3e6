"""Session guard for the workspace pages.

Every ``/session/*`` request must carry a verifiable session cookie for the
project named in the path; anything else is redirected to the home page.
Verification is purely cryptographic, so the guard never touches the
database.
"""

import logging
from uuid import UUID

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse

from keepsake.core import settings
from keepsake.services.session import SessionSigner

logger = logging.getLogger(__name__)

GUARDED_PREFIX = "/session"


def _path_project_id(path: str) -> UUID | None:
    """Project id from ``/session/{project_id}/...``, if the segment is one."""
    parts = path.split("/")
    if len(parts) < 3:
        return None
    try:
        return UUID(parts[2])
    except ValueError:
        return None


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Redirect unauthenticated workspace requests to ``/``."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        if not (path == GUARDED_PREFIX or path.startswith(GUARDED_PREFIX + "/")):
            return await call_next(request)

        signer: SessionSigner = request.app.state.session_signer
        claims = signer.verify(request.cookies.get(settings.session_cookie_name))

        if claims is None:
            logger.debug(f"Unauthenticated workspace request: {request.method} {path}")
            return RedirectResponse(url="/", status_code=307)

        path_project_id = _path_project_id(path)
        if path_project_id is not None and path_project_id != claims.project_id:
            logger.warning(
                f"Session for project {claims.project_id} used on project {path_project_id}"
            )
            return RedirectResponse(url="/", status_code=307)

        return await call_next(request)
