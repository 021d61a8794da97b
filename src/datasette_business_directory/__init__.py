"""Datasette plugin for a community business directory with suggestion moderation."""

from datasette_business_directory.plugin import (
    register_routes,
    skip_csrf,
    startup,
)

__version__ = "0.1.0"

__all__ = [
    "register_routes",
    "skip_csrf",
    "startup",
]
