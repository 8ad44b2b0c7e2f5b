"""Log listing API for podlogkeeper.

Exposes:
    create_app -- FastAPI application factory.
    build_app  -- Alias for create_app (used by podlogkeeper.app bootstrap).
"""

from podlogkeeper.api.app import create_app

build_app = create_app

__all__ = ["build_app", "create_app"]
