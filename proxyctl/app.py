"""FastAPI application factory for the proxy control plane."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .backend import ProxyBackend
from .bootstrap import bootstrap_state, shutdown_state
from .config import Settings, get_settings
from .errors import ControlPlaneError
from .routers import models_router, proxy_router
from .state import RuntimeState


def create_app(settings: Optional[Settings] = None, backend: Optional[ProxyBackend] = None) -> FastAPI:
    settings = settings or get_settings()
    runtime_state = RuntimeState()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print("Starting proxy control plane...")
        await bootstrap_state(runtime_state, settings, backend)
        print("Control plane initialization completed.")
        yield
        await shutdown_state(runtime_state)
        print("Control plane shutdown completed.")

    app = FastAPI(title="Proxy Control Plane", lifespan=lifespan)
    app.state.settings = settings
    app.state.runtime_state = runtime_state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ControlPlaneError)
    async def control_plane_error_handler(request: Request, exc: ControlPlaneError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})

    app.include_router(proxy_router.router)
    app.include_router(models_router.router)

    return app
