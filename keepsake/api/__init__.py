# Keepsake API
from keepsake.api.router import api_router

__all__ = ["api_router"]
