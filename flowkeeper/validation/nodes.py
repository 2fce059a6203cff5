"""
Node configuration validation

Dispatches every configured node to the field rules of its type and collects
one NodeErrorRecord per failing node. Every failing check is recorded (no
stop-at-first-error); several messages on the same field are joined with
" | ".
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.nodes import (
    ApiNodeData,
    ConditionalNodeData,
    FormNodeData,
    Node,
    NodeKind,
)
from .errors import ErrorIdFactory
from .fields import FieldContext, validate_field

logger = logging.getLogger(__name__)

# Record slots, in the order used to pick the primary message
NODE_ERROR_SLOTS: Tuple[str, ...] = (
    "customName",
    "url",
    "fieldToEvaluate",
    "operator",
    "value",
    "method",
    "fieldName",
    "fieldLabel",
)

MESSAGE_SEPARATOR = " | "
NAMED_NODE_TYPES = (NodeKind.FORM, NodeKind.CONDITIONAL, NodeKind.API)


class NodeErrorRecord(BaseModel):
    """
    Per-node configuration errors

    One slot per validated field; an empty string means the field passed.
    `message` is the first non-empty slot in NODE_ERROR_SLOTS order.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    node_id: str = Field(alias="nodeId")
    node_type: str = Field(alias="nodeType")
    message: str = "Node Configuration Error"

    custom_name: str = Field(default="", alias="customName")
    url: str = ""
    field_to_evaluate: str = Field(default="", alias="fieldToEvaluate")
    operator: str = ""
    value: str = ""
    method: str = ""
    field_name: str = Field(default="", alias="fieldName")
    field_label: str = Field(default="", alias="fieldLabel")

    def slot(self, field: str) -> str:
        """Message for a slot, addressed by its editor name (e.g. customName)"""
        for name, info in type(self).model_fields.items():
            if info.alias == field or name == field:
                return getattr(self, name)
        raise KeyError(field)

    def slots(self) -> Dict[str, str]:
        return {field: self.slot(field) for field in NODE_ERROR_SLOTS}

    def failing_fields(self) -> List[str]:
        return [field for field in NODE_ERROR_SLOTS if self.slot(field)]


class _NodeErrorCollector:
    """Accumulates slot messages for one node"""

    def __init__(self, node: Node):
        self.node = node
        self.context = FieldContext(node_type=node.type)
        self._slots: Dict[str, str] = {}

    def append(self, slot: str, message: Optional[str]) -> None:
        if not message:
            return
        current = self._slots.get(slot)
        self._slots[slot] = (
            f"{current}{MESSAGE_SEPARATOR}{message}" if current else message
        )

    def check(
        self, field: str, value, context: Optional[FieldContext] = None
    ) -> Optional[str]:
        error = validate_field(field, value or "", context or self.context)
        self.append(field, error)
        return error

    def has_errors(self) -> bool:
        return bool(self._slots)

    def build(self, ids: ErrorIdFactory) -> NodeErrorRecord:
        primary = next(
            (self._slots[slot] for slot in NODE_ERROR_SLOTS if self._slots.get(slot)),
            "Node Configuration Error",
        )
        return NodeErrorRecord(
            id=ids.next_id(f"node-error-{self.node.id}"),
            node_id=self.node.id,
            node_type=self.node.type,
            message=primary,
            **self._slots,
        )


def _validate_form(collector: _NodeErrorCollector, data: FormNodeData) -> None:
    if not data.form_fields:
        collector.append("fieldName", "At least one field is required")
        return

    for index, form_field in enumerate(data.form_fields, start=1):
        name_error = validate_field(
            "fieldName", form_field.name or "", collector.context
        )
        if name_error:
            collector.append("fieldName", f"Field {index} name: {name_error}")

        label_error = validate_field(
            "fieldLabel", form_field.label or "", collector.context
        )
        if label_error:
            collector.append("fieldLabel", f"Field {index} label: {label_error}")


def _validate_conditional(
    collector: _NodeErrorCollector, data: ConditionalNodeData
) -> None:
    collector.check("fieldToEvaluate", data.field_to_evaluate)
    collector.check("operator", data.operator)
    collector.check(
        "value",
        data.value,
        FieldContext(node_type=collector.node.type, operator=data.operator),
    )


def _validate_api(collector: _NodeErrorCollector, data: ApiNodeData) -> None:
    collector.check("url", data.url)
    collector.check("method", data.method)


def validate_node(node: Node, ids: ErrorIdFactory) -> Optional[NodeErrorRecord]:
    """
    Validate one node's configuration

    Returns:
        The node's error record, or None when the node passes or has no
        payload yet
    """
    if not node.has_payload():
        return None

    collector = _NodeErrorCollector(node)
    data = node.data

    if node.type in NAMED_NODE_TYPES:
        collector.check("customName", getattr(data, "custom_name", None))

    if isinstance(data, FormNodeData):
        _validate_form(collector, data)
    elif isinstance(data, ConditionalNodeData):
        _validate_conditional(collector, data)
    elif isinstance(data, ApiNodeData):
        _validate_api(collector, data)

    if not collector.has_errors():
        return None
    return collector.build(ids)


def validate_nodes(
    nodes: Sequence[Node], ids: Optional[ErrorIdFactory] = None
) -> Dict[str, NodeErrorRecord]:
    """
    Validate the configuration of every node

    Args:
        nodes: graph nodes
        ids: error id factory; a fresh one is used when omitted

    Returns:
        node id -> error record, only for failing nodes, in input order
    """
    ids = ids or ErrorIdFactory()
    records: Dict[str, NodeErrorRecord] = {}

    for node in nodes:
        record = validate_node(node, ids)
        if record is not None:
            records[node.id] = record

    if records:
        logger.debug("Node validation found %d failing node(s)", len(records))
    return records
