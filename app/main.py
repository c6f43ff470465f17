"""
Main FastAPI application for the SyncEnv API.

Copies games, and the documents they reference, from one data environment
to another (normally Production -> Local).
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env file
from dotenv import load_dotenv
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.core.middleware import CorrelationIdMiddleware
from app.api.routes import environments, sync
from app.services.sample_data import initialize_environments
from app.services.store import build_store
from app.services.sync.locks import KeyedLockRegistry

# Configure structured logging (JSON in deployed environments, colored locally)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    app.state.store = build_store(settings)
    logger.info(
        f"Store backend '{settings.STORE_BACKEND}' serving environments: "
        f"{', '.join(app.state.store.list_environments())}"
    )

    if settings.SEED_SAMPLE_DATA:
        seeded = await initialize_environments(app.state.store)
        if seeded:
            logger.info(f"Seeded sample data into {', '.join(seeded)}")

    logger.info("Application started")

    yield

    # Shutdown
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Dependency-aware sync of games and their references between data environments",
    lifespan=lifespan
)

# Shared across requests so overlapping syncs serialize on common documents
app.state.commit_locks = KeyedLockRegistry()

# Add correlation ID middleware (must be added before CORS for proper header handling)
app.add_middleware(CorrelationIdMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 - all routes use /api/v1/ prefix for versioning
app.include_router(sync.router, prefix="/api/v1")
app.include_router(environments.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "api_version": "v1",
            "sync": {
                "preview": "/api/v1/sync/games/{gameId}/preview",
                "sync": "/api/v1/sync/games/{gameId}",
                "find_games": "/api/v1/sync/games"
            },
            "environments": "/api/v1/environments",
            "docs": "/docs",
            "health": "/health"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    store = getattr(app.state, "store", None)
    return {
        "status": "healthy" if store is not None else "starting",
        "version": settings.APP_VERSION,
        "store_backend": settings.STORE_BACKEND,
        "environments": store.list_environments() if store is not None else []
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
