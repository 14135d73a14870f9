# ioc_kernel/fastapi.py (framework)
from __future__ import annotations

from typing import Any, Iterable, Optional, Type

from fastapi import APIRouter, Depends, FastAPI, Request

from ioc_kernel.config.log_config import get_logger
from ioc_kernel.api.registry_router import router as registry_router
from ioc_kernel.di.container import Container
from ioc_kernel.web.errors import add_error_handlers

log = get_logger(__name__)


def get_container(request: Request) -> Container:
    """The container installed on the app serving this request."""
    container: Optional[Container] = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError(
            "No container installed on this app. "
            "Did you call install_container() or create_kernel_app()?"
        )
    return container


def Resolved(requested: Type[Any]) -> Any:
    """
    FastAPI dependency resolving 'requested' from the app's container.

    Usage:
        @app.get("/signup")
        def signup(svc: SignupService = Resolved(SignupService)):
            ...
    """

    def _resolve(request: Request):
        return get_container(request).resolve(requested)

    _resolve.__name__ = f"resolve_{getattr(requested, '__name__', 'dependency')}"
    return Depends(_resolve)


def install_container(app: FastAPI, container: Container) -> None:
    """Attach 'container' to app.state and map resolution failures to JSON errors."""
    app.state.container = container
    add_error_handlers(app)
    log.info("kernel.container_installed", app=app.title)


def create_kernel_app(
    *,
    container: Optional[Container] = None,
    title: str = "App",
    middlewares: Iterable = (),
    include_registry_router: bool = True,
) -> FastAPI:
    """
    Create an app wired to a container.

    - container: defaults to Container.from_settings() (IOC_* environment)
    - middlewares: class-based middlewares, objects with .cls and .kwargs
    - include_registry_router: mount GET /registry/bindings
    """
    app = FastAPI(title=title)

    for mw in middlewares:
        app.add_middleware(mw.cls, **mw.kwargs)

    install_container(app, container if container is not None else Container.from_settings())

    if include_registry_router:
        app.include_router(registry_router)

    return app


def mount_routers(app: FastAPI, routers: Iterable[APIRouter]) -> None:
    """Include application routers; their Resolved() dependencies use app.state.container."""
    for router in routers:
        app.include_router(router)
        log.debug("router.mounted", prefix=router.prefix)
