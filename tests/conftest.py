"""Shared fixtures"""

import logging

import pytest

from flowkeeper.autosave import ManualScheduler, MemorySink


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def valid_graph():
    """start -> form -> end, every node fully configured"""
    nodes = [
        {"id": "s1", "type": "start", "data": {"label": "Start"}},
        {
            "id": "f1",
            "type": "form",
            "data": {
                "customName": "Signup",
                "fields": [{"id": "fld1", "name": "email", "label": "Email"}],
            },
        },
        {"id": "e1", "type": "end", "data": {"label": "End"}},
    ]
    edges = [
        {"id": "x1", "source": "s1", "target": "f1"},
        {"id": "x2", "source": "f1", "target": "e1"},
    ]
    return nodes, edges


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers():
    """CLI runs install a stderr handler bound to the runner's stream"""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_flowkeeper", False):
            root.removeHandler(handler)
