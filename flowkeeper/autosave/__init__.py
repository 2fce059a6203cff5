"""flowkeeper autosave

Debounced, validation-gated persistence of the editor graph:
- timer schedulers (logical clock and asyncio)
- persistence sinks and snapshot store
- the autosave state machine
"""

from .scheduler import (
    TimerHandle,
    TimerScheduler,
    ManualScheduler,
    AsyncioScheduler,
    TimerSlots,
)
from .sink import PersistenceSink, MemorySink, FileSink, SnapshotStore
from .machine import (
    AutoSaveState,
    AutoSavePersistence,
    DEFAULT_DEBOUNCE_MS,
    MIN_SAVING_MS,
    SAVED_DISPLAY_MS,
)

__all__ = [
    # Scheduler
    "TimerHandle",
    "TimerScheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "TimerSlots",
    # Sink
    "PersistenceSink",
    "MemorySink",
    "FileSink",
    "SnapshotStore",
    # Machine
    "AutoSaveState",
    "AutoSavePersistence",
    "DEFAULT_DEBOUNCE_MS",
    "MIN_SAVING_MS",
    "SAVED_DISPLAY_MS",
]
