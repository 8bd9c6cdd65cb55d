"""Logging setup for the bridge and its CLI."""

from .logging import configure_logging

__all__ = ["configure_logging"]
