import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging_config import setup_logging
from app.db.mongo import mongodb
from app.api.api import api_router

setup_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await mongodb.connect()
    try:
        yield
    finally:
        await mongodb.close()


def mount_frontend(app: FastAPI, static_dir: str) -> bool:
    """Serve the built front end, falling back to index.html for client-side routes."""
    dist_path = Path(static_dir).resolve()
    index_path = dist_path / "index.html"
    if not index_path.is_file():
        logger.warning("Front end not found at %s, static serving disabled", dist_path)
        return False

    app.mount("/assets", StaticFiles(directory=dist_path / "assets", check_dir=False), name="assets")

    api_prefix = settings.API_PREFIX.strip("/")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        if full_path == api_prefix or full_path.startswith(api_prefix + "/"):
            return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Not Found"})
        candidate = (dist_path / full_path).resolve()
        if full_path and candidate.is_file() and dist_path in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(index_path)

    logger.info("Serving front end from %s", dist_path)
    return True


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    if settings.is_production:
        mount_frontend(app, settings.STATIC_DIR)
    else:
        @app.get("/")
        async def root():
            return {"message": "Welcome to Debt Ledger API"}

    return app


app = create_app()
