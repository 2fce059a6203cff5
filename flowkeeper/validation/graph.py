"""
Graph structure validation

Checks the workflow graph on its undirected projection:
- exactly one start node and exactly one end node
- every node reaches the minimum number of distinct neighbours for its type
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Set

from ..core.edges import Edge
from ..core.nodes import Node, NodeKind
from .errors import ErrorIdFactory, ValidationError, build_error

logger = logging.getLogger(__name__)

# Minimum distinct neighbours per node type
MIN_CONNECTIONS: Dict[str, int] = {
    NodeKind.START: 1,
    NodeKind.FORM: 2,
    NodeKind.CONDITIONAL: 3,
    NodeKind.API: 2,
    NodeKind.END: 1,
}
DEFAULT_MIN_CONNECTIONS = 1


def capitalize(value: str) -> str:
    """First letter upper case, rest lower case"""
    if not value:
        return ""
    return value[0].upper() + value[1:].lower()


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    if count == 1:
        return singular
    return plural or singular + "s"


def build_undirected_adjacency(
    nodes: Sequence[Node], edges: Sequence[Edge]
) -> Dict[str, Set[str]]:
    """
    Build the undirected neighbour sets

    Edges whose endpoints are not both known nodes are skipped, as are
    self-loops. Parallel edges count once.
    """
    adjacency: Dict[str, Set[str]] = {node.id: set() for node in nodes}

    for edge in edges:
        if edge.source not in adjacency or edge.target not in adjacency:
            logger.debug(
                "Skipping dangling edge %s -> %s", edge.source, edge.target
            )
            continue
        if edge.is_self_loop():
            continue
        adjacency[edge.source].add(edge.target)
        adjacency[edge.target].add(edge.source)

    return adjacency


def validate_single_role(
    nodes: Sequence[Node], node_type: str, label: str, ids: ErrorIdFactory
) -> Optional[ValidationError]:
    """Check that exactly one node of node_type exists"""
    matches = [node for node in nodes if node.type == node_type]
    if not matches:
        return build_error(f"Workflow must have one {label} block", ids)
    if len(matches) > 1:
        return build_error(
            f"Workflow must have exactly one {label} block", ids, matches[0].id
        )
    return None


def validate_node_connection_requirements(
    nodes: Sequence[Node],
    adjacency: Mapping[str, Set[str]],
    ids: ErrorIdFactory,
    requirements: Mapping[str, int] = MIN_CONNECTIONS,
) -> List[ValidationError]:
    """
    Check minimum degree per node, in input node order

    Degree 0 always reports "not connected"; a partially connected node
    reports how many connections are missing.
    """
    errors: List[ValidationError] = []

    for node in nodes:
        degree = len(adjacency.get(node.id, ()))
        required = requirements.get(node.type, DEFAULT_MIN_CONNECTIONS)
        type_label = capitalize(node.type)

        if degree == 0:
            errors.append(
                build_error(f"{type_label} Node is not connected", ids, node.id)
            )
            continue

        if degree < required:
            missing = required - degree
            errors.append(
                build_error(
                    f"{type_label} Node is missing {missing} "
                    f"{pluralize(missing, 'connection')}",
                    ids,
                    node.id,
                )
            )

    return errors


def validate_graph(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    ids: Optional[ErrorIdFactory] = None,
) -> List[ValidationError]:
    """
    Validate graph structure

    Args:
        nodes: graph nodes
        edges: graph edges
        ids: error id factory; a fresh one is used when omitted

    Returns:
        Role errors (start, then end) followed by connectivity errors
    """
    ids = ids or ErrorIdFactory()
    errors: List[ValidationError] = []

    for node_type, label in ((NodeKind.START, "Start"), (NodeKind.END, "End")):
        role_error = validate_single_role(nodes, node_type, label, ids)
        if role_error is not None:
            errors.append(role_error)

    adjacency = build_undirected_adjacency(nodes, edges)
    errors.extend(validate_node_connection_requirements(nodes, adjacency, ids))

    return errors
