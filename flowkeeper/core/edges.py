"""
flowkeeper edge definitions

An edge connects two nodes. The editor records a direction (source ->
target), but validation works on the undirected projection.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..exceptions.errors import DocumentError


class Edge(BaseModel):
    """
    Connection between two nodes

    Must contain:
    - source: source node id
    - target: target node id

    Handle ids, styling and other editor keys are kept as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    source: str
    target: str
    id: Optional[str] = None

    def is_self_loop(self) -> bool:
        return self.source == self.target

    def endpoints(self) -> frozenset:
        """Unordered endpoint pair"""
        return frozenset((self.source, self.target))


def parse_edge(data: Dict[str, Any]) -> Edge:
    """Parse an edge from a mapping"""
    try:
        return Edge.model_validate(data)
    except ValueError as e:
        raise DocumentError(f"Invalid edge: {e}", {"edge": data}) from e
