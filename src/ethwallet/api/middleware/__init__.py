"""API middleware — CORS."""

from ethwallet.api.middleware.cors import setup_cors

__all__ = ["setup_cors"]
