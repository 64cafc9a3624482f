"""CORS middleware configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

_AUTH_HEADERS = ["x-auth-password"]


def setup_cors(app: FastAPI) -> None:
    """Allow all origins and the password header through pre-flight."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*", *_AUTH_HEADERS],
    )
