"""Command-line interface for convocore."""

from .app import app

__all__ = ["app"]
