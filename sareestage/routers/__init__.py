"""Router package exposing the backend and edge relay routers."""

from .generate.router import router as generate_router
from .relay.router import router as relay_router

__all__ = ["generate_router", "relay_router"]
