"""
Validation API

Boundary functions used by the editor:
- compute_graph_errors: structural errors
- compute_node_errors: per-node configuration errors
- validate_single_field: on-blur check of a single input
- validate_workflow: both sets at once
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from ..core.document import coerce_edges, coerce_nodes
from ..core.edges import Edge
from ..core.nodes import Node
from .errors import ErrorIdFactory, ValidationError
from .fields import ContextLike, validate_field
from .graph import validate_graph
from .nodes import NodeErrorRecord, validate_nodes

NodesLike = Iterable[Union[Node, dict]]
EdgesLike = Iterable[Union[Edge, dict]]


@dataclass
class ValidationReport:
    """
    Validation result for one graph snapshot

    Attributes:
        graph_errors: ordered structural errors
        node_errors: node id -> configuration errors
    """

    graph_errors: List[ValidationError] = field(default_factory=list)
    node_errors: Dict[str, NodeErrorRecord] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Empty error sets are the only signal that saving is allowed"""
        return not self.graph_errors and not self.node_errors

    def errors_for_node(self, node_id: str) -> List[str]:
        """Every message attached to a node, structural first"""
        messages = [e.message for e in self.graph_errors if e.node_id == node_id]
        record = self.node_errors.get(node_id)
        if record is not None:
            messages.extend(m for m in record.slots().values() if m)
        return messages


def compute_graph_errors(
    nodes: NodesLike, edges: EdgesLike, ids: Optional[ErrorIdFactory] = None
) -> List[ValidationError]:
    """Structural errors; unknown node types get the default minimum degree"""
    return validate_graph(coerce_nodes(nodes, strict=False), coerce_edges(edges), ids)


def compute_node_errors(
    nodes: NodesLike, ids: Optional[ErrorIdFactory] = None
) -> Dict[str, NodeErrorRecord]:
    return validate_nodes(coerce_nodes(nodes, strict=False), ids)


def validate_single_field(
    field: str, value, context: ContextLike = None
) -> Optional[str]:
    """On-blur validation of one input"""
    return validate_field(field, value, context)


def validate_workflow(nodes: NodesLike, edges: EdgesLike) -> ValidationReport:
    """Compute structural and node errors with one id sequence"""
    node_list = coerce_nodes(nodes, strict=False)
    edge_list = coerce_edges(edges)
    ids = ErrorIdFactory()
    return ValidationReport(
        graph_errors=validate_graph(node_list, edge_list, ids),
        node_errors=validate_nodes(node_list, ids),
    )
