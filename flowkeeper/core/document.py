"""
flowkeeper document model

WorkflowGraph is the editor's graph snapshot; PersistedSnapshot is the
durable artifact autosave writes.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator

from .nodes import Node, parse_node
from .edges import Edge, parse_edge
from ..exceptions.errors import DocumentError, SnapshotError

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """
    Format a timestamp as ISO-8601 UTC with millisecond precision

    e.g. 2024-05-01T12:30:00.250Z
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by format_timestamp"""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def coerce_nodes(
    nodes: Iterable[Union[Node, dict]], strict: bool = True
) -> List[Node]:
    """Accept node models or raw mappings; see parse_node for strict"""
    return [
        node if isinstance(node, Node) else parse_node(node, strict)
        for node in nodes
    ]


def coerce_edges(edges: Iterable[Union[Edge, dict]]) -> List[Edge]:
    """Accept edge models or raw mappings"""
    return [edge if isinstance(edge, Edge) else parse_edge(edge) for edge in edges]


class WorkflowGraph(BaseModel):
    """
    Workflow graph

    Must contain:
    - nodes: node list
    - edges: edge list
    """

    model_config = ConfigDict(extra="allow")

    # nodes dump with their own type so payload fields survive
    nodes: List[SerializeAsAny[Node]] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    @field_validator("nodes", mode="before")
    @classmethod
    def parse_nodes(cls, v):
        """Parse the node list"""
        if v is None:
            return []
        return [parse_node(node) if isinstance(node, dict) else node for node in v]

    @field_validator("edges", mode="before")
    @classmethod
    def parse_edges(cls, v):
        if v is None:
            return []
        return v

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]


class PersistedSnapshot(BaseModel):
    """
    Persisted snapshot

    Serialized as {"nodes": [...], "edges": [...], "savedAt": "<ISO-8601>"}.
    The savedAt string is kept verbatim so it round-trips exactly.
    """

    model_config = ConfigDict(populate_by_name=True)

    nodes: List[SerializeAsAny[Node]] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    saved_at: str = Field(alias="savedAt")

    @field_validator("nodes", mode="before")
    @classmethod
    def parse_nodes(cls, v):
        if v is None:
            return []
        return [parse_node(node) if isinstance(node, dict) else node for node in v]

    @field_validator("saved_at")
    @classmethod
    def validate_saved_at(cls, v):
        """savedAt must be an ISO-8601 timestamp"""
        parse_timestamp(v)
        return v

    @classmethod
    def capture(
        cls,
        nodes: Iterable[Union[Node, dict]],
        edges: Iterable[Union[Edge, dict]],
        saved_at: datetime,
    ) -> "PersistedSnapshot":
        """Build a snapshot of the current graph stamped with saved_at"""
        return cls(
            nodes=coerce_nodes(nodes),
            edges=coerce_edges(edges),
            saved_at=format_timestamp(saved_at),
        )

    @property
    def saved_at_datetime(self) -> datetime:
        return parse_timestamp(self.saved_at)

    def to_payload(self) -> dict:
        """Plain JSON-compatible payload"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "PersistedSnapshot":
        """
        Decode a stored payload

        Raises:
            SnapshotError: payload is not JSON or not a snapshot
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError("Snapshot must be a JSON object")

        try:
            return cls.model_validate(data)
        except (ValueError, DocumentError) as e:
            raise SnapshotError(f"Invalid snapshot: {e}") from e


def load_graph(path: Union[str, Path]) -> WorkflowGraph:
    """
    Load a graph from a YAML or JSON file

    A bare snapshot file (with savedAt) is accepted as well; the timestamp is
    ignored.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DocumentError(f"Cannot parse graph file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocumentError(f"Graph file {path} must contain a mapping")

    logger.debug("Loaded graph file %s", path)
    try:
        return WorkflowGraph(nodes=data.get("nodes"), edges=data.get("edges"))
    except ValueError as e:
        raise DocumentError(f"Invalid graph file {path}: {e}") from e
