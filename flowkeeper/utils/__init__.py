"""
Utilities

Helpers shared by the CLI and host applications.
"""

from .logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
