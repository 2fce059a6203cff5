"""
Field validation rules

validate_field() checks one configuration field of one node. It is pure: the
verdict depends only on (field, value, context), and nothing is mutated.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..core.nodes import NodeKind

IS_EMPTY_OPERATOR = "is_empty"
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")

_FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
_URL_PATTERN = re.compile(r"^https?://.+")


@dataclass(frozen=True)
class FieldContext:
    """
    Context for a field check

    Attributes:
        node_type: type tag of the node owning the field
        operator: selected operator, consulted by the `value` rule
    """

    node_type: Optional[str] = None
    operator: Optional[str] = None


ContextLike = Union[FieldContext, Mapping[str, Any], None]


def as_context(context: ContextLike) -> FieldContext:
    """
    Normalize a context argument

    Accepts a FieldContext, None, or a mapping using either the editor's
    camelCase keys (nodeType) or snake_case keys (node_type).
    """
    if context is None:
        return FieldContext()
    if isinstance(context, FieldContext):
        return context
    return FieldContext(
        node_type=context.get("nodeType", context.get("node_type")),
        operator=context.get("operator"),
    )


def _subject(node_type: Optional[str]) -> str:
    return "Condition Name" if node_type == NodeKind.CONDITIONAL else "Form Name"


def _check_custom_name(value: str, ctx: FieldContext) -> Optional[str]:
    subject = _subject(ctx.node_type)
    if not value:
        return f"{subject} is required"
    if len(value) < 3:
        return f"{subject} must have a minimum of 3 characters"
    return None


def _check_field_name(value: str, ctx: FieldContext) -> Optional[str]:
    if not value:
        return "Field Name is required"
    if not _FIELD_NAME_PATTERN.match(value):
        return "Field Name must be alphanumeric only (no spaces)"
    if len(value) < 2:
        return "Field Name must have a minimum of 2 characters"
    return None


def _check_field_label(value: str, ctx: FieldContext) -> Optional[str]:
    if not value:
        return "Field Label is required"
    if len(value) < 2:
        return "Field Label must have a minimum of 2 characters"
    return None


def _check_field_to_evaluate(value: str, ctx: FieldContext) -> Optional[str]:
    if ctx.node_type == NodeKind.CONDITIONAL and not value:
        return "Field to Evaluate is required"
    return None


def _check_operator(value: str, ctx: FieldContext) -> Optional[str]:
    if ctx.node_type == NodeKind.CONDITIONAL and not value:
        return "Operator is required"
    return None


def _check_value(value: str, ctx: FieldContext) -> Optional[str]:
    if (
        ctx.node_type == NodeKind.CONDITIONAL
        and ctx.operator != IS_EMPTY_OPERATOR
        and not value
    ):
        return "Value is required"
    return None


def _check_url(value: str, ctx: FieldContext) -> Optional[str]:
    if ctx.node_type != NodeKind.API:
        return None
    if not value:
        return "URL is required"
    if not _URL_PATTERN.match(value):
        return "URL must start with http:// or https://"
    return None


def _check_method(value: str, ctx: FieldContext) -> Optional[str]:
    if ctx.node_type != NodeKind.API:
        return None
    if not value:
        return "Method is required"
    if value.upper() not in HTTP_METHODS:
        return "Method must be GET, POST, PUT, or DELETE"
    return None


FIELD_RULES = {
    # form, conditional and api nodes
    "customName": _check_custom_name,
    # form node
    "fieldName": _check_field_name,
    "fieldLabel": _check_field_label,
    # conditional node
    "fieldToEvaluate": _check_field_to_evaluate,
    "operator": _check_operator,
    "value": _check_value,
    # api node
    "url": _check_url,
    "method": _check_method,
}


def validate_field(
    field: str, value: Any, context: ContextLike = None
) -> Optional[str]:
    """
    Validate a single field value

    Args:
        field: field name (customName, fieldName, url, ...)
        value: raw value; surrounding whitespace is ignored
        context: owning node type and, for `value`, the selected operator

    Returns:
        Error message, or None when the value passes (unknown fields always
        pass)
    """
    rule = FIELD_RULES.get(field)
    if rule is None:
        return None

    trimmed = "" if value is None else str(value).strip()
    return rule(trimmed, as_context(context))
