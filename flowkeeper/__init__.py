"""
flowkeeper - validation and autosave core of a visual workflow editor

Provides:
- structural and per-node validation of a workflow graph
- debounced, validation-gated autosave of graph snapshots
"""

__version__ = "0.1.0"

from .exceptions import (
    FlowkeeperError,
    DocumentError,
    StorageFailure,
    SnapshotError,
    ConfigError,
)
from .core import (
    Node,
    Edge,
    WorkflowGraph,
    PersistedSnapshot,
    parse_node,
    load_graph,
)
from .validation import (
    ValidationError,
    NodeErrorRecord,
    ValidationReport,
    compute_graph_errors,
    compute_node_errors,
    validate_single_field,
    validate_workflow,
)
from .autosave import (
    AutoSaveState,
    AutoSavePersistence,
    PersistenceSink,
    MemorySink,
    FileSink,
    SnapshotStore,
    ManualScheduler,
    AsyncioScheduler,
)

__all__ = [
    "__version__",
    # Errors
    "FlowkeeperError",
    "DocumentError",
    "StorageFailure",
    "SnapshotError",
    "ConfigError",
    # Core
    "Node",
    "Edge",
    "WorkflowGraph",
    "PersistedSnapshot",
    "parse_node",
    "load_graph",
    # Validation
    "ValidationError",
    "NodeErrorRecord",
    "ValidationReport",
    "compute_graph_errors",
    "compute_node_errors",
    "validate_single_field",
    "validate_workflow",
    # Autosave
    "AutoSaveState",
    "AutoSavePersistence",
    "PersistenceSink",
    "MemorySink",
    "FileSink",
    "SnapshotStore",
    "ManualScheduler",
    "AsyncioScheduler",
]
