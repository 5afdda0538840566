"""Logging helpers shared by all metasync components."""

from .logger import configure_logging, log_event

__all__ = ["configure_logging", "log_event"]
