"""Logging and event hooks for signet."""

from . import hooks, logger

__all__ = ["hooks", "logger"]
