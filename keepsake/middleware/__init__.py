"""Middleware module for Keepsake."""

from keepsake.middleware.security_headers import SecurityHeadersMiddleware
from keepsake.middleware.session_guard import SessionGuardMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
    "SessionGuardMiddleware",
]
