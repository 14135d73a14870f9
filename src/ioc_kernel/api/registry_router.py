"""
──────────────────────────────────────────────────────────────
Default Kernel Router: container bindings
──────────────────────────────────────────────────────────────
Purpose:
    Expose what the app's container currently holds, for
    debugging wiring problems.

Exports:
    router → FastAPI APIRouter instance
──────────────────────────────────────────────────────────────
"""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/registry", tags=["system"])


def _type_name(typ) -> str:
    return f"{typ.__module__}.{typ.__qualname__}" if hasattr(typ, "__qualname__") else repr(typ)


@router.get("/bindings")
async def list_bindings(request: Request):
    """Bindings in insertion order; only the first one per type is reachable."""
    container = request.app.state.container
    return [
        {"type": _type_name(b.requested_type), "built": b.built}
        for b in container.bindings()
    ]
