"""
Apostila Store API - Main Application.

FastAPI application with CORS enabled for the landing page.

Importing this module reads no configuration. Settings are resolved when the
app starts (through `get_settings`, or its override in
`app.dependency_overrides`), which is also when `STATIC_DIR` is mounted at
`/static`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from api import __version__
from api.dependencies import get_settings
from config.settings import Settings

LANDING_PAGE: str = "apostila.html"

logger = logging.getLogger(__name__)


def mount_static(app: FastAPI, settings: Settings) -> None:
    """Serve `settings.static_dir` at `/static`, replacing any earlier mount."""
    app.router.routes[:] = [
        route for route in app.router.routes if getattr(route, "name", None) != "static"
    ]
    if settings.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.dependency_overrides.get(get_settings, get_settings)()
    mount_static(app, settings)
    yield


# Create FastAPI application
app = FastAPI(
    lifespan=lifespan,
    title="Apostila Store API",
    description="Pix checkout and delivery for the Módulo I booklet",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - the landing page may be served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400 with the usual `{error}` body."""
    logger.info("Rejected malformed request", extra={"path": request.url.path})
    return JSONResponse(status_code=400, content={"error": "Dados inválidos."})


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "apostila-store-api"
    }


@app.get("/", tags=["Root"], include_in_schema=False)
def root(settings: Settings = Depends(get_settings)):
    """
    Landing page, or API information when no page is deployed.
    """
    landing_page = settings.static_dir / LANDING_PAGE
    if landing_page.is_file():
        return FileResponse(landing_page)
    return {
        "message": "Apostila Store API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import sales, webhooks

app.include_router(sales.router, tags=["Sales"])
app.include_router(webhooks.router, tags=["Webhooks"])


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run() -> None:
    """Run the API with uvicorn on the configured port."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting server", extra={"port": settings.port})
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
