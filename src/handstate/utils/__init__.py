"""Utility modules."""
from .logger import LoggingConfig, setup_logging

__all__ = ["LoggingConfig", "setup_logging"]
