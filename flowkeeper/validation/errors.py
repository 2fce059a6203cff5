"""
Validation error records

Validation findings are values, not exceptions. Each pass produces a fresh
batch; callers replace the previous batch wholesale.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Error severity"""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationError(BaseModel):
    """
    Structural validation error

    Attributes:
        id: unique within one validation pass
        severity: error/warning/info
        message: human-readable description
        node_id: offending node, when the error is attached to one
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    severity: Severity = Severity.ERROR
    message: str
    node_id: Optional[str] = Field(default=None, alias="nodeId")


class ErrorIdFactory:
    """
    Error id generator owned by a single validation call

    Ids are sequential per factory, so validating the same graph twice with
    fresh factories yields identical ids.
    """

    def __init__(self, prefix: str = "validation"):
        self.prefix = prefix
        self._counter = 0

    def next_id(self, prefix: Optional[str] = None) -> str:
        self._counter += 1
        return f"{prefix or self.prefix}-{self._counter}"


def build_error(
    message: str,
    ids: ErrorIdFactory,
    node_id: Optional[str] = None,
    severity: Severity = Severity.ERROR,
) -> ValidationError:
    """Create an error record with the next id from ids"""
    return ValidationError(
        id=ids.next_id(), severity=severity, message=message, node_id=node_id
    )
