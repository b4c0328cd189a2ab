"""Shared CORS configuration for backend services."""

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


# Development origins (dev environment only)
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8080",
]


def get_allowed_origins(environ: Optional[dict] = None) -> list[str]:
    """
    Allowed CORS origins for the current environment.

    CORS_ORIGINS is a comma separated list; FRONTEND_URL is appended when set;
    the localhost origins are added outside production.
    """
    environ = os.environ if environ is None else environ
    origins = [
        origin.strip().rstrip("/")
        for origin in environ.get("CORS_ORIGINS", "").split(",")
        if origin.strip()
    ]

    frontend_url = environ.get("FRONTEND_URL")
    if frontend_url:
        clean_url = frontend_url.rstrip("/")
        if clean_url not in origins:
            origins.append(clean_url)

    if environ.get("ENVIRONMENT", "development") != "production":
        origins.extend(origin for origin in DEV_ORIGINS if origin not in origins)

    return origins


def setup_cors(app: FastAPI) -> None:
    """Add the CORS middleware to a FastAPI app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
