from keepsake.schemas.project import (
    CurrentSessionResponse,
    ExchangeRequest,
    OkResponse,
    OnboardResponse,
    OwnerMetadata,
)

__all__ = [
    "CurrentSessionResponse",
    "ExchangeRequest",
    "OkResponse",
    "OnboardResponse",
    "OwnerMetadata",
]
