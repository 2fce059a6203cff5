"""flowkeeper exception module

Provides every exception raised by the package
"""

from .errors import (
    FlowkeeperError,
    DocumentError,
    StorageFailure,
    SnapshotError,
    ConfigError,
)

__all__ = [
    "FlowkeeperError",
    "DocumentError",
    "StorageFailure",
    "SnapshotError",
    "ConfigError",
]
