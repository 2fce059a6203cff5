"""
flowkeeper exception definitions

Validation findings are plain values (see flowkeeper.validation); the
exceptions here cover parsing, configuration and persistence failures.
"""

from typing import Any, Dict, Optional


class FlowkeeperError(Exception):
    """flowkeeper base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentError(FlowkeeperError):
    """
    Graph document error

    Raised when a graph file or a node/edge mapping cannot be parsed, such as
    an unknown node type or a malformed payload.
    """

    pass


class StorageFailure(FlowkeeperError):
    """
    Persistence sink write failure

    Raised by a sink when a value cannot be stored (quota exceeded, I/O
    error) or when a snapshot cannot be serialized.
    """

    pass


class SnapshotError(FlowkeeperError):
    """
    Snapshot decode error

    Raised when a stored payload is not a valid persisted snapshot.
    """

    pass


class ConfigError(FlowkeeperError):
    """
    Configuration error

    Raised when a configuration source carries a value of the wrong type.
    """

    pass
