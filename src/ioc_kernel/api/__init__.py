"""
Built-in kernel routers.
──────────────────────────────────────────────────────────────
Currently includes:
 - /registry/bindings
──────────────────────────────────────────────────────────────
"""
from .registry_router import router as registry_router

__all__ = ["registry_router"]
