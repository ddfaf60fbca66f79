"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from thumbnail_studio.core.config import get_settings
from thumbnail_studio.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, close the shared HTTP client at shutdown."""
    settings = get_settings()
    http_client = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
    try:
        from thumbnail_studio.services.credentials import credential_store_from_settings
        from thumbnail_studio.services.studio import StudioService

        credential_store = credential_store_from_settings(settings)
        app.state.credential_store = credential_store
        app.state.studio_service = StudioService(
            credential_store=credential_store,
            default_model=settings.default_model,
            location=settings.vertex_ai_location,
            timeout=settings.request_timeout_seconds,
            http_client=http_client,
            max_sessions=settings.max_sessions,
        )
        logger.info("Services initialized successfully")
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        # Continue without services; endpoints return 503 until fixed

    yield
    await http_client.aclose()


# Create FastAPI app
app = FastAPI(
    title="Thumbnail Studio",
    description="YouTube thumbnail prompt builder and Gemini/Imagen image generation",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"http://localhost:{settings.frontend_port}"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from thumbnail_studio.api.credentials import router as credentials_router  # noqa: E402
from thumbnail_studio.api.thumbnail import router as thumbnail_router  # noqa: E402

app.include_router(thumbnail_router)
app.include_router(credentials_router)


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; ``services.studio`` and ``services.credentials``
    report whether an image credential is configured.
    """
    svc = getattr(request.app.state, "studio_service", None)
    store = getattr(request.app.state, "credential_store", None)
    has_credential = store is not None and bool(store.load().api_key.strip())

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": {
            "studio": "ok" if svc is not None else "unavailable",
            "credentials": "configured" if has_credential else "missing",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "thumbnail_studio.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
    )
