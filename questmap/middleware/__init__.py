"""Middleware package for the QuestMap Engine."""

from questmap.middleware.error_handler import setup_error_handlers

__all__ = [
    "setup_error_handlers",
]
