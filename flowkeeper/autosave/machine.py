"""
Autosave state machine

Decides on every graph change whether to persist the snapshot and which
status to show:

    idle --change--> (debounce) --errors--> error
                                --ok-----> saving --min dwell--> saved --display--> idle

All waits are named timers on an injected TimerScheduler:
- debounce: restarted by every change, only the latest change is acted on
- min_dwell: keeps `saving` visible for at least min_saving_ms from entry
- display: returns `saved` to `idle`
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence

from ..config import AutoSaveConfig
from ..core.document import PersistedSnapshot
from .scheduler import AsyncioScheduler, TimerScheduler, TimerSlots
from .sink import PersistenceSink, SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 2000
MIN_SAVING_MS = 500
SAVED_DISPLAY_MS = 2000

DEBOUNCE_TIMER = "debounce"
MIN_DWELL_TIMER = "min_dwell"
DISPLAY_TIMER = "display"

StateListener = Callable[["AutoSaveState", "AutoSaveState"], None]


class AutoSaveState(str, Enum):
    """Autosave status"""

    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


@dataclass
class _PendingChange:
    """Graph and validation verdict captured by the latest change"""

    nodes: List[Any]
    edges: List[Any]
    graph_error_count: int
    node_error_count: int

    @property
    def blocked(self) -> bool:
        return self.graph_error_count > 0 or self.node_error_count > 0


class AutoSavePersistence:
    """
    Debounced, validation-gated autosave

    Args:
        sink: key-value store receiving the snapshot
        storage_key: key the snapshot is written under
        scheduler: timer source; defaults to the running asyncio loop
        debounce_ms: quiet period after the last change
        min_saving_ms: minimum time `saving` stays visible
        saved_display_ms: time `saved` stays visible before `idle`
        clock: timestamp source for savedAt; defaults to the scheduler's
    """

    def __init__(
        self,
        sink: PersistenceSink,
        storage_key: str,
        scheduler: Optional[TimerScheduler] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        min_saving_ms: int = MIN_SAVING_MS,
        saved_display_ms: int = SAVED_DISPLAY_MS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = SnapshotStore(sink, storage_key)
        self.scheduler = scheduler or AsyncioScheduler()
        self.debounce_ms = debounce_ms
        self.min_saving_ms = min_saving_ms
        self.saved_display_ms = saved_display_ms
        self._clock = clock or self.scheduler.wall_clock

        self._timers = TimerSlots(self.scheduler)
        self._state = AutoSaveState.IDLE
        self._last_saved: Optional[datetime] = None
        self._pending: Optional[_PendingChange] = None
        self._initial_change_seen = False
        self._closed = False
        self._listeners: List[StateListener] = []

    @classmethod
    def from_config(
        cls,
        config: AutoSaveConfig,
        sink: PersistenceSink,
        scheduler: Optional[TimerScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "AutoSavePersistence":
        return cls(
            sink,
            config.storage_key,
            scheduler=scheduler,
            debounce_ms=config.debounce_ms,
            min_saving_ms=config.min_saving_ms,
            saved_display_ms=config.saved_display_ms,
            clock=clock,
        )

    @property
    def state(self) -> AutoSaveState:
        return self._state

    @property
    def last_saved(self) -> Optional[datetime]:
        return self._last_saved

    @property
    def storage_key(self) -> str:
        return self.store.key

    @property
    def save_pending(self) -> bool:
        """True while a change waits for its debounce timer"""
        return self._timers.is_armed(DEBOUNCE_TIMER)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a state-change listener

        The listener receives (previous, current). Returns a function that
        removes it again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(
        self,
        nodes: Sequence[Any],
        edges: Sequence[Any],
        graph_errors: Sequence[Any] = (),
        node_errors: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Report a change of the graph or of its validation results

        The very first report after construction only records the initial
        graph; it never schedules a save.
        """
        if self._closed:
            logger.debug("Ignoring change on closed autosave '%s'", self.storage_key)
            return

        if not self._initial_change_seen:
            self._initial_change_seen = True
            logger.debug("Skipping initial graph for '%s'", self.storage_key)
            return

        self._pending = _PendingChange(
            nodes=list(nodes),
            edges=list(edges),
            graph_error_count=len(graph_errors),
            node_error_count=len(node_errors or {}),
        )
        self._timers.arm(DEBOUNCE_TIMER, self.debounce_ms, self._on_debounce_elapsed)

    def reset(self, state: AutoSaveState = AutoSaveState.IDLE) -> None:
        """
        Force the status

        Cancels the dwell and display timers of the current cycle; a pending
        debounced change is kept and still saves.
        """
        self._timers.cancel(MIN_DWELL_TIMER)
        self._timers.cancel(DISPLAY_TIMER)
        self._set_state(AutoSaveState(state))

    def close(self) -> None:
        """
        Tear down

        Cancels every pending timer without a state transition. A change
        still inside its debounce window is not saved.
        """
        self._timers.cancel_all()
        self._pending = None
        self._closed = True

    def _set_state(self, state: AutoSaveState) -> None:
        previous = self._state
        if previous == state:
            return
        self._state = state
        logger.debug(
            "Autosave '%s': %s -> %s", self.storage_key, previous.value, state.value
        )
        for listener in list(self._listeners):
            listener(previous, state)

    def _on_debounce_elapsed(self) -> None:
        pending, self._pending = self._pending, None
        if pending is None:
            return

        # a previous cycle's timers must not move the status past this decision
        self._timers.cancel(DISPLAY_TIMER)
        self._timers.cancel(MIN_DWELL_TIMER)

        if pending.blocked:
            logger.warning(
                "Autosave '%s' blocked by %d graph error(s) and %d node error(s)",
                self.storage_key,
                pending.graph_error_count,
                pending.node_error_count,
            )
            self._set_state(AutoSaveState.ERROR)
            return

        entered_at = self.scheduler.now()
        saved_at = self._clock()
        self._set_state(AutoSaveState.SAVING)

        try:
            snapshot = PersistedSnapshot.capture(pending.nodes, pending.edges, saved_at)
            self.store.save(snapshot)
        except Exception as e:
            # any capture or sink failure ends the cycle in error
            logger.warning(
                "Autosave '%s' failed: %s", self.storage_key, e, exc_info=True
            )
            self._set_state(AutoSaveState.ERROR)
            return

        remaining = self.min_saving_ms - (self.scheduler.now() - entered_at)
        self._timers.arm(
            MIN_DWELL_TIMER, max(0.0, remaining), lambda: self._on_saved(saved_at)
        )

    def _on_saved(self, saved_at: datetime) -> None:
        self._last_saved = saved_at
        self._set_state(AutoSaveState.SAVED)
        self._timers.arm(DISPLAY_TIMER, self.saved_display_ms, self._on_display_elapsed)

    def _on_display_elapsed(self) -> None:
        self._set_state(AutoSaveState.IDLE)
