# ioc_kernel/web/errors.py
from __future__ import annotations
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ioc_kernel.config.log_config import get_logger
from ioc_kernel.di.errors import (
    AmbiguousProvider,
    CircularDependency,
    ConstructionError,
    DependencyMissing,
    ResolutionError,
)

log = get_logger(__name__)


def error_envelope(code: str, message: str, details=None):
    return {"error": {"code": code, "message": message, "details": details or {}}}


def _describe(exc: ResolutionError):
    if isinstance(exc, DependencyMissing):
        details = {"owner": exc.owner.__name__}
        if exc.field:
            details["field"] = exc.field
        return "DEPENDENCY_MISSING", details
    if isinstance(exc, AmbiguousProvider):
        return "AMBIGUOUS_PROVIDER", {"candidates": [c.__name__ for c in exc.candidates]}
    if isinstance(exc, ConstructionError):
        return "CONSTRUCTION_ERROR", {"target": exc.target.__name__}
    if isinstance(exc, CircularDependency):
        return "CIRCULAR_DEPENDENCY", {"target": exc.target.__name__}
    return "RESOLUTION_ERROR", {}


async def resolution_error_handler(request: Request, exc: ResolutionError):
    code, details = _describe(exc)
    log.error("request.resolution_failed", path=request.url.path, code=code, error=str(exc))
    return JSONResponse(error_envelope(code, str(exc), details), status_code=500)


def add_error_handlers(app: FastAPI) -> None:
    """Map container failures raised while serving a request to the error envelope."""
    app.add_exception_handler(ResolutionError, resolution_error_handler)
