# backend/assetdb/main.py
import logging
import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .apps.components.router import router as components_router

logger = logging.getLogger(__name__)

DEV_ORIGINS = ["http://127.0.0.1:5173", "http://localhost:5173"]


def _allowed_origins() -> List[str]:
    """CORS_ALLOWED_ORIGINS as a list; comma-separated, blanks ignored."""
    configured = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]
    return configured or list(DEV_ORIGINS)


def create_app() -> FastAPI:
    application = FastAPI(title="Asset DB API", version="1.0.0")

    origins = _allowed_origins()
    # Browsers refuse credentialed requests against a wildcard origin.
    wildcard = "*" in origins
    if wildcard:
        logger.warning("CORS_ALLOWED_ORIGINS contains '*'; credentials disabled")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_api_route("/", read_root, methods=["GET"], tags=["health"])
    application.add_api_route("/health", health, methods=["GET"], tags=["health"])
    application.include_router(components_router)
    return application


def read_root():
    return {"status": "ok", "message": "Asset DB backend is running"}


def health():
    return {"status": "ok"}


app = create_app()
