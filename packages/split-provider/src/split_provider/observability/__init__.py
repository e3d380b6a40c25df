"""Structured logging for split-provider."""

from .logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
