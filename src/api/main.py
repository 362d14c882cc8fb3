"""FastAPI application entry point."""

import os
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Must run before importing modules that read env vars at import time
# (token_service fails fast on a missing JWT secret outside development)
load_dotenv()

from api.errors import register_exception_handlers
from api.routes import auth, health, users
from utils.logging import setup_structured_logging
from adapter.mongodb.connection import close_client, get_mongodb_client, DATABASE_NAME
from adapter.mongodb.indexes import ensure_all_indexes

setup_structured_logging()

logger = logging.getLogger(__name__)

# pyproject.toml is the single source of truth for the version
_project_root = Path(__file__).parent.parent.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "User Accounts API"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    logger.info("Starting service", extra={"service": SERVICE_NAME, "version": VERSION, "environment": ENVIRONMENT})

    # The unique email index is what enforces one account per email
    client = get_mongodb_client()
    if client:
        if ensure_all_indexes(client[DATABASE_NAME]):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield

    close_client()
    logger.info("Service stopped", extra={"service": SERVICE_NAME})


app = FastAPI(
    title=SERVICE_NAME,
    description="User registration, login, profile management and user listing",
    version=VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)

def cors_settings(value: str) -> tuple[list[str], bool]:
    """Parse CORS_ORIGINS ("*" or a comma-separated list) into (origins, allow_credentials).

    Browsers reject credentials combined with a wildcard origin.
    """
    if value.strip() == "*":
        logger.warning("CORS allows any origin; set CORS_ORIGINS to explicit origins in production")
        return ["*"], False
    origins = [origin.strip() for origin in value.split(",") if origin.strip()]
    logger.info("CORS origins configured", extra={"origins": origins})
    return origins, True


cors_origins, allow_credentials = cors_settings(os.getenv("CORS_ORIGINS", "http://localhost:5173"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Service banner with the endpoint map."""
    return {
        "success": True,
        "message": SERVICE_NAME,
        "data": {
            "version": VERSION,
            "endpoints": {
                "health": "/api/health",
                "auth": "/api/auth",
                "users": "/api/users",
            },
        },
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False  # request logs go through the structured handler instead
    )
