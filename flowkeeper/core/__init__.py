"""flowkeeper core components

Graph data model shared by validation and autosave:
- node and edge definitions
- workflow graph and persisted snapshot
"""

from .nodes import (
    NodeKind,
    NodeData,
    NamedNodeData,
    FormField,
    FormNodeData,
    ConditionalNodeData,
    ApiNodeData,
    Position,
    Node,
    StartNode,
    EndNode,
    FormNode,
    ConditionalNode,
    ApiNode,
    NODE_CLASSES,
    parse_node,
)
from .edges import Edge, parse_edge
from .document import (
    WorkflowGraph,
    PersistedSnapshot,
    coerce_nodes,
    coerce_edges,
    format_timestamp,
    parse_timestamp,
    load_graph,
)

__all__ = [
    # Nodes
    "NodeKind",
    "NodeData",
    "NamedNodeData",
    "FormField",
    "FormNodeData",
    "ConditionalNodeData",
    "ApiNodeData",
    "Position",
    "Node",
    "StartNode",
    "EndNode",
    "FormNode",
    "ConditionalNode",
    "ApiNode",
    "NODE_CLASSES",
    "parse_node",
    # Edges
    "Edge",
    "parse_edge",
    # Document
    "WorkflowGraph",
    "PersistedSnapshot",
    "coerce_nodes",
    "coerce_edges",
    "format_timestamp",
    "parse_timestamp",
    "load_graph",
]
