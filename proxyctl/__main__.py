"""Command line entry point: ``python -m proxyctl``."""

from __future__ import annotations

from .catalog import MODEL_CATALOG
from .config import get_settings


def main() -> None:
    """Start the control plane API server."""
    import uvicorn

    from .app import create_app

    settings = get_settings()

    if settings.debug_mode:
        print("Debug mode enabled")

    print("\n--- Proxy Control Plane ---")
    print(f"Debug Mode: {settings.debug_mode}")
    print(f"Proxy service: {settings.proxy_backend_url}")
    print(f"Status poll interval: {settings.poll_interval}s")
    print("Endpoints:")
    print("  GET    /api/proxy/status")
    print("  GET    /api/config")
    print("  POST   /api/config/reload")
    print("  PATCH  /api/proxy/config")
    print("  POST   /api/proxy/toggle")
    print("  POST   /api/proxy/api-key/regeneration")
    print("  POST   /api/proxy/api-key/regeneration/{token}/confirm")
    print("  DELETE /api/proxy/api-key/regeneration/{token}")
    print("  GET    /api/models")
    print("  GET    /api/models/{model_id}/examples")
    print(f"\nControl API Keys: {len(settings.control_api_keys) or 'none (open)'}")
    print(f"Catalog models: {len(MODEL_CATALOG)}")
    print("---------------------------")

    print(f"Starting server on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
