"""flowkeeper validation engine

Structural (graph) and configuration (field/node) validation of a workflow
graph snapshot.
"""

from .errors import Severity, ValidationError, ErrorIdFactory, build_error
from .fields import (
    FieldContext,
    FIELD_RULES,
    HTTP_METHODS,
    IS_EMPTY_OPERATOR,
    validate_field,
)
from .graph import (
    MIN_CONNECTIONS,
    build_undirected_adjacency,
    validate_node_connection_requirements,
    validate_graph,
)
from .nodes import NODE_ERROR_SLOTS, NodeErrorRecord, validate_node, validate_nodes
from .aggregate import (
    ValidationReport,
    compute_graph_errors,
    compute_node_errors,
    validate_single_field,
    validate_workflow,
)

__all__ = [
    # Errors
    "Severity",
    "ValidationError",
    "ErrorIdFactory",
    "build_error",
    # Fields
    "FieldContext",
    "FIELD_RULES",
    "HTTP_METHODS",
    "IS_EMPTY_OPERATOR",
    "validate_field",
    # Graph
    "MIN_CONNECTIONS",
    "build_undirected_adjacency",
    "validate_node_connection_requirements",
    "validate_graph",
    # Nodes
    "NODE_ERROR_SLOTS",
    "NodeErrorRecord",
    "validate_node",
    "validate_nodes",
    # API
    "ValidationReport",
    "compute_graph_errors",
    "compute_node_errors",
    "validate_single_field",
    "validate_workflow",
]
