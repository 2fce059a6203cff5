"""
Unit tests: node configuration validation

Dispatch per node type, collect-all aggregation into NodeErrorRecord, and the
skipping of unconfigured nodes
"""

from typing import Any, Dict, Optional

from flowkeeper.core.nodes import Node, parse_node
from flowkeeper.validation.errors import ErrorIdFactory
from flowkeeper.validation.nodes import (
    NODE_ERROR_SLOTS,
    NodeErrorRecord,
    validate_node,
    validate_nodes,
)


def make_node(node_id: str, node_type: str, data: Optional[Dict[str, Any]] = None) -> Node:
    payload: Dict[str, Any] = {"id": node_id, "type": node_type}
    if data is not None:
        payload["data"] = data
    return parse_node(payload)


def form(node_id="f1", **data) -> Node:
    return make_node(node_id, "form", data)


class TestSkipping:
    """Nodes without configuration"""

    def test_node_without_data_is_skipped(self):
        assert validate_nodes([make_node("f1", "form")]) == {}

    def test_node_with_empty_data_is_skipped(self):
        assert validate_nodes([make_node("a1", "api", {})]) == {}

    def test_start_and_end_are_not_field_validated(self):
        nodes = [
            make_node("s1", "start", {"label": "Start"}),
            make_node("e1", "end", {"label": ""}),
        ]
        assert validate_nodes(nodes) == {}

    def test_valid_nodes_produce_no_records(self):
        nodes = [
            form(customName="Signup", fields=[{"name": "email", "label": "Email"}]),
            make_node(
                "c1",
                "conditional",
                {"customName": "Is adult", "fieldToEvaluate": "age", "operator": "gt", "value": "17"},
            ),
            make_node("a1", "api", {"customName": "Notify", "url": "https://x.io", "method": "post"}),
        ]
        assert validate_nodes(nodes) == {}


class TestFormNode:
    """form node dispatch"""

    def test_short_custom_name(self):
        records = validate_nodes([form(customName="ab", fields=[{"name": "email", "label": "Email"}])])

        record = records["f1"]
        assert record.custom_name == "Form Name must have a minimum of 3 characters"
        assert record.failing_fields() == ["customName"]
        assert record.message == "Form Name must have a minimum of 3 characters"
        assert record.node_type == "form"

    def test_empty_field_list_stops_field_checks(self):
        records = validate_nodes([form(customName="Signup", fields=[])])

        record = records["f1"]
        assert record.field_name == "At least one field is required"
        assert record.field_label == ""
        assert record.failing_fields() == ["fieldName"]

    def test_absent_field_list(self):
        record = validate_nodes([form(customName="Signup")])["f1"]
        assert record.field_name == "At least one field is required"

    def test_collects_every_field_error(self):
        """Every entry is checked and messages are index-qualified"""
        record = validate_nodes(
            [
                form(
                    customName="",
                    fields=[
                        {"name": "bad name", "label": "A"},
                        {"name": "", "label": "Label"},
                        {"name": "ok_name", "label": "Fine"},
                    ],
                )
            ]
        )["f1"]

        assert record.custom_name == "Form Name is required"
        assert record.field_name == (
            "Field 1 name: Field Name must be alphanumeric only (no spaces)"
            " | Field 2 name: Field Name is required"
        )
        assert record.field_label == (
            "Field 1 label: Field Label must have a minimum of 2 characters"
        )
        assert record.failing_fields() == ["customName", "fieldName", "fieldLabel"]


class TestConditionalNode:
    """conditional node dispatch"""

    def test_missing_everything(self):
        record = validate_nodes([make_node("c1", "conditional", {"customName": "Branch"})])["c1"]

        assert record.field_to_evaluate == "Field to Evaluate is required"
        assert record.operator == "Operator is required"
        assert record.value == "Value is required"
        assert record.message == "Field to Evaluate is required"

    def test_is_empty_operator_needs_no_value(self):
        nodes = [
            make_node(
                "c1",
                "conditional",
                {"customName": "Branch", "fieldToEvaluate": "email", "operator": "is_empty"},
            )
        ]
        assert validate_nodes(nodes) == {}

    def test_value_required_for_other_operators(self):
        record = validate_nodes(
            [
                make_node(
                    "c1",
                    "conditional",
                    {"customName": "Branch", "fieldToEvaluate": "age", "operator": "equals", "value": " "},
                )
            ]
        )["c1"]
        assert record.failing_fields() == ["value"]

    def test_condition_name_wording(self):
        record = validate_nodes(
            [
                make_node(
                    "c1",
                    "conditional",
                    {"customName": "ab", "fieldToEvaluate": "age", "operator": "is_empty"},
                )
            ]
        )["c1"]
        assert record.custom_name == "Condition Name must have a minimum of 3 characters"


class TestApiNode:
    """api node dispatch"""

    def test_url_and_method(self):
        record = validate_nodes(
            [make_node("a1", "api", {"customName": "Api", "url": "example.com", "method": "patch"})]
        )["a1"]

        assert record.url == "URL must start with http:// or https://"
        assert record.method == "Method must be GET, POST, PUT, or DELETE"
        assert record.custom_name == ""
        # url comes before method in slot order
        assert record.message == "URL must start with http:// or https://"

    def test_missing_url_only(self):
        record = validate_nodes([make_node("a1", "api", {"customName": "Fetch", "method": "GET"})])["a1"]
        assert record.slots() == {
            "customName": "",
            "url": "URL is required",
            "fieldToEvaluate": "",
            "operator": "",
            "value": "",
            "method": "",
            "fieldName": "",
            "fieldLabel": "",
        }


class TestRecords:
    """Result mapping and record shape"""

    def test_only_failing_nodes_in_input_order(self):
        nodes = [
            make_node("a1", "api", {"customName": "x"}),
            form("f1", customName="Signup", fields=[{"name": "email", "label": "Email"}]),
            form("f2", customName="", fields=[{"name": "email", "label": "Email"}]),
        ]
        records = validate_nodes(nodes)
        assert list(records) == ["a1", "f2"]

    def test_record_ids(self):
        records = validate_nodes([form("f1", customName=""), form("f2", customName="")])
        assert records["f1"].id == "node-error-f1-1"
        assert records["f2"].id == "node-error-f2-2"

    def test_validate_node_uses_given_factory(self):
        ids = ErrorIdFactory()
        record = validate_node(form("f9", customName=""), ids)
        assert isinstance(record, NodeErrorRecord)
        assert record.node_id == "f9"
        assert record.id == "node-error-f9-1"

    def test_slot_lookup(self):
        record = validate_nodes([form(customName="")])["f1"]
        assert record.slot("customName") == record.custom_name
        assert record.slot("custom_name") == record.custom_name
        assert tuple(record.slots()) == NODE_ERROR_SLOTS

    def test_serialized_with_editor_names(self):
        record = validate_nodes([form(customName="")])["f1"]
        dumped = record.model_dump(by_alias=True)
        assert dumped["nodeId"] == "f1"
        assert dumped["customName"] == "Form Name is required"
        assert dumped["fieldName"] == "At least one field is required"


class TestBaseNodeConstruction:
    """Nodes built as a plain Node get the payload model of their type"""

    def test_form_built_as_base_node(self):
        records = validate_nodes(
            [Node(id="f1", type="form", data={"customName": "Signup", "fields": []})]
        )
        record = records["f1"]
        assert record.custom_name == ""
        assert record.field_name == "At least one field is required"

    def test_valid_api_built_as_base_node(self):
        node = Node(
            id="a1",
            type="api",
            data={"customName": "Notify", "url": "https://x.io", "method": "GET"},
        )
        assert validate_nodes([node]) == {}

    def test_conditional_built_as_base_node(self):
        node = Node(
            id="c1",
            type="conditional",
            data={"customName": "Branch", "fieldToEvaluate": "age", "operator": "equals"},
        )
        assert validate_nodes([node])["c1"].failing_fields() == ["value"]
