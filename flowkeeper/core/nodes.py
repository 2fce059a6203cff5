"""
flowkeeper node definitions

Workflow editor node types: start, form, conditional, api, end.
Each node carries a type-specific data payload; the payload model is chosen by
the node's type tag.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, model_validator

from ..exceptions.errors import DocumentError


class NodeKind:
    """Node type tags"""

    START = "start"
    FORM = "form"
    CONDITIONAL = "conditional"
    API = "api"
    END = "end"

    ALL = (START, FORM, CONDITIONAL, API, END)


class NodeData(BaseModel):
    """
    Node data payload

    Keys the editor stores beside the validated ones (labels, colors, ...)
    are kept as extras so a snapshot round-trips unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def is_empty(self) -> bool:
        """True when the raw payload carried no keys at all"""
        return not self.model_fields_set and not self.model_extra


class NamedNodeData(NodeData):
    """Payload shared by the configurable node types"""

    custom_name: Optional[str] = Field(default=None, alias="customName")


class FormField(BaseModel):
    """A single input declared by a form node"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    label: Optional[str] = None
    type: Optional[str] = None
    required: Optional[bool] = None


class FormNodeData(NamedNodeData):
    """form node payload"""

    form_fields: Optional[List[FormField]] = Field(default=None, alias="fields")


class ConditionalNodeData(NamedNodeData):
    """
    conditional node payload

    Evaluates `fieldToEvaluate <operator> value`; the `is_empty` operator
    takes no value.
    """

    field_to_evaluate: Optional[str] = Field(default=None, alias="fieldToEvaluate")
    operator: Optional[str] = None
    value: Optional[str] = None


class ApiNodeData(NamedNodeData):
    """api node payload (request descriptor)"""

    url: Optional[str] = None
    method: Optional[str] = None


class Position(BaseModel):
    """Canvas position"""

    x: float = 0.0
    y: float = 0.0


# Payload model per type tag
PAYLOAD_CLASSES: Dict[str, Type[NodeData]] = {
    NodeKind.START: NodeData,
    NodeKind.FORM: FormNodeData,
    NodeKind.CONDITIONAL: ConditionalNodeData,
    NodeKind.API: ApiNodeData,
    NodeKind.END: NodeData,
}


class Node(BaseModel):
    """
    Node base class

    Every node has:
    - id: unique identifier
    - type: one of start/form/conditional/api/end
    - data: type-specific payload (may be absent for a fresh node)
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    type: str
    position: Optional[Position] = None
    data: Optional[SerializeAsAny[NodeData]] = None

    @model_validator(mode="before")
    @classmethod
    def parse_payload(cls, values):
        """Validate data with the payload model of the type tag"""
        if not isinstance(values, dict):
            return values

        payload_cls = PAYLOAD_CLASSES.get(values.get("type"))
        data = values.get("data")
        if payload_cls is None or data is None or isinstance(data, payload_cls):
            return values

        if isinstance(data, NodeData):
            data = data.model_dump(by_alias=True, exclude_none=True)
        return {**values, "data": payload_cls.model_validate(data)}

    def has_payload(self) -> bool:
        """True when the node carries a non-empty data payload"""
        return self.data is not None and not self.data.is_empty()


class StartNode(Node):
    """start node, entry point of the workflow"""

    type: str = NodeKind.START


class EndNode(Node):
    """end node, exit point of the workflow"""

    type: str = NodeKind.END


class FormNode(Node):
    """form node, collects user input"""

    type: str = NodeKind.FORM
    data: Optional[FormNodeData] = None


class ConditionalNode(Node):
    """conditional node, branches on a field value"""

    type: str = NodeKind.CONDITIONAL
    data: Optional[ConditionalNodeData] = None


class ApiNode(Node):
    """api node, issues an HTTP request"""

    type: str = NodeKind.API
    data: Optional[ApiNodeData] = None


NODE_CLASSES: Dict[str, Type[Node]] = {
    NodeKind.START: StartNode,
    NodeKind.FORM: FormNode,
    NodeKind.CONDITIONAL: ConditionalNode,
    NodeKind.API: ApiNode,
    NodeKind.END: EndNode,
}


def parse_node(data: Dict[str, Any], strict: bool = True) -> Node:
    """
    Parse a node from a mapping, dispatching on its type tag

    Args:
        data: raw node mapping
        strict: reject unknown type tags; when False they parse as a base Node
    """
    if not isinstance(data, dict):
        raise DocumentError(f"Node must be a mapping, got {type(data).__name__}")

    node_type = data.get("type")
    node_cls = NODE_CLASSES.get(node_type)
    if node_cls is None and not strict:
        node_cls = Node
    if node_cls is None:
        raise DocumentError(
            f"Unknown node type: {node_type}", {"node_id": data.get("id")}
        )

    try:
        return node_cls.model_validate(data)
    except ValueError as e:
        raise DocumentError(
            f"Invalid {node_type} node: {e}", {"node_id": data.get("id")}
        ) from e
