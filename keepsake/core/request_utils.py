"""Request utility functions for handling common request operations."""

import ipaddress
import logging

from fastapi import Request

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = ("127.0.0.1", "::1", "localhost")


def _is_valid_ip(ip_str: str) -> bool:
    """Check if a string is a valid IP address."""
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """Get the client IP address used for exchange rate limiting.

    X-Real-IP is honoured only when the direct peer is a local reverse proxy.
    X-Forwarded-For is never trusted. Returns "unknown" when the transport
    exposes no peer address.
    """
    if request.client and request.client.host in _LOOPBACK_HOSTS:
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            ip = real_ip.strip()
            if _is_valid_ip(ip):
                return ip
            logger.warning(f"Invalid X-Real-IP: {real_ip}")

    if request.client:
        return request.client.host

    return "unknown"


def get_request_origin(request: Request, public_base_url: str | None = None) -> str:
    """Origin used to build share links.

    Prefers the configured public base URL, then the browser's Origin
    header, then the URL the request arrived on.
    """
    if public_base_url:
        return public_base_url
    origin = request.headers.get("origin")
    if origin:
        return origin.rstrip("/")
    return str(request.base_url).rstrip("/")
