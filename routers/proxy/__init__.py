"""Gateway proxy endpoint and shared upstream client."""

from routers.proxy._router import router
from routers.proxy._streaming import close_client

__all__ = [
    "router",
    "close_client",
]
