"""
VSM Store

Single-writer holder of the current value stream map. Editors call the
store, the store calls the pure mutator functions and notifies subscribers
with the new map. Earlier maps handed out stay valid because they are
never modified.

Usage:
    store = VSMStore(vsm_mutator.create("vsm1", "Flow"))
    unsubscribe = store.subscribe(render)
    store.add_process(ProcessBlock.create("p1", "Intake", metrics={"processTime": 5}))
    store.dispatch("remove_process", process_id="p1")
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TYPE_CHECKING

from valuestream.application import vsm_mutator
from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.value_stream import ValueStreamMap
from valuestream.domain.services.aggregator import MetricsCalculator

if TYPE_CHECKING:
    from valuestream.config.settings import Settings

Listener = Callable[[ValueStreamMap], None]


class UnsupportedActionError(ValueError):
    """Raised by VSMStore.dispatch for an unknown action name."""


class VSMStore:
    """Holds the current ValueStreamMap and applies changes to it."""

    ACTIONS = (
        "add_process",
        "add_connection",
        "update_process",
        "update_connection",
        "remove_process",
        "remove_connection",
        "reset",
    )

    def __init__(
        self,
        vsm: ValueStreamMap,
        calculator: Optional[MetricsCalculator] = None,
    ) -> None:
        self._vsm = vsm
        self._calculator = calculator
        self._listeners: List[Listener] = []
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, vsm: ValueStreamMap, settings: "Settings") -> "VSMStore":
        return cls(vsm, calculator=MetricsCalculator.from_settings(settings))

    @property
    def state(self) -> ValueStreamMap:
        return self._vsm

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; it is called immediately and after every change."""
        self._listeners.append(listener)
        listener(self._vsm)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_process(self, process: ProcessBlock) -> ValueStreamMap:
        return self._set(vsm_mutator.add_process(self._vsm, process, calculator=self._calculator))

    def add_connection(self, connection: Connection) -> ValueStreamMap:
        return self._set(vsm_mutator.add_connection(self._vsm, connection, calculator=self._calculator))

    def update_process(self, process_id: str, **changes: Any) -> ValueStreamMap:
        return self._set(vsm_mutator.update_process(
            self._vsm, process_id, calculator=self._calculator, **changes
        ))

    def update_connection(self, connection_id: str, **changes: Any) -> ValueStreamMap:
        return self._set(vsm_mutator.update_connection(
            self._vsm, connection_id, calculator=self._calculator, **changes
        ))

    def remove_process(self, process_id: str) -> ValueStreamMap:
        return self._set(vsm_mutator.remove_process(self._vsm, process_id, calculator=self._calculator))

    def remove_connection(self, connection_id: str) -> ValueStreamMap:
        return self._set(vsm_mutator.remove_connection(
            self._vsm, connection_id, calculator=self._calculator
        ))

    def reset(self, vsm: ValueStreamMap) -> ValueStreamMap:
        return self._set(vsm)

    def dispatch(self, action: str, **data: Any) -> ValueStreamMap:
        """
        Apply a named action, e.g. ``dispatch("remove_process", process_id="p1")``.

        Raises:
            UnsupportedActionError: unknown action name
        """
        if action not in self.ACTIONS:
            raise UnsupportedActionError(f"Unsupported action type: {action}")
        return getattr(self, action)(**data)

    def _set(self, vsm: ValueStreamMap) -> ValueStreamMap:
        if vsm is self._vsm:
            return vsm
        self._vsm = vsm
        self._logger.debug(
            "VSM %s updated: %d processes, %d connections",
            vsm.id, len(vsm.processes), len(vsm.connections),
        )
        for listener in list(self._listeners):
            listener(vsm)
        return vsm
