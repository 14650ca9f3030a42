"""
VSM Mutator

Pure operations on ValueStreamMap values. Every operation returns a new map
and leaves its arguments untouched; metrics are recomputed from scratch
whenever the processes or connections change.

    create(id, title, processes, connections)
    update(vsm, **changes)
    add_process(vsm, process) / add_connection(vsm, connection)
    update_process(vsm, process_id, ...) / update_connection(vsm, connection_id, ...)
    remove_process(vsm, process_id) / remove_connection(vsm, connection_id)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional, Sequence

from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.value_stream import ValueStreamMap
from valuestream.domain.services.aggregator import MetricsCalculator, calculate_metrics

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"id", "title", "processes", "connections"})


def _compute(
    processes: Sequence[ProcessBlock],
    connections: Sequence[Connection],
    calculator: Optional[MetricsCalculator],
):
    if calculator is None:
        return calculate_metrics(processes, connections)
    return calculator.calculate(processes, connections)


def _check_unique(kind: str, items: Iterable[Any]) -> None:
    seen = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"Duplicate {kind} id: {item.id}")
        seen.add(item.id)


def create(
    id: str,
    title: str,
    processes: Iterable[ProcessBlock] = (),
    connections: Iterable[Connection] = (),
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    """Build a value stream map and compute its metrics."""
    processes = tuple(processes)
    connections = tuple(connections)
    _check_unique("process", processes)
    _check_unique("connection", connections)
    return ValueStreamMap(
        id=id,
        title=title,
        processes=processes,
        connections=connections,
        metrics=_compute(processes, connections, calculator),
    )


def update(
    vsm: ValueStreamMap,
    calculator: Optional[MetricsCalculator] = None,
    **changes: Any,
) -> ValueStreamMap:
    """
    Shallow-merge ``changes`` into the map.

    Metrics are recomputed when ``processes`` or ``connections`` is given and
    carried over otherwise.

    Raises:
        ValueError: unknown field name or duplicate ids
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update VSM field(s): {', '.join(sorted(unknown))}")

    if "processes" in changes:
        changes["processes"] = tuple(changes["processes"])
        _check_unique("process", changes["processes"])
    if "connections" in changes:
        changes["connections"] = tuple(changes["connections"])
        _check_unique("connection", changes["connections"])

    updated = replace(vsm, **changes)
    if "processes" in changes or "connections" in changes:
        updated = replace(
            updated,
            metrics=_compute(updated.processes, updated.connections, calculator),
        )
    return updated


def add_process(
    vsm: ValueStreamMap,
    process: ProcessBlock,
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    return update(vsm, calculator=calculator, processes=vsm.processes + (process,))


def add_connection(
    vsm: ValueStreamMap,
    connection: Connection,
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    return update(vsm, calculator=calculator, connections=vsm.connections + (connection,))


def update_process(
    vsm: ValueStreamMap,
    process_id: str,
    calculator: Optional[MetricsCalculator] = None,
    **changes: Any,
) -> ValueStreamMap:
    """Apply ProcessBlock.updated(**changes) to one process; unknown ids are a no-op."""
    if vsm.get_process(process_id) is None:
        logger.warning("update_process: no process with id %s", process_id)
        return vsm
    processes = tuple(
        p.updated(**changes) if p.id == process_id else p for p in vsm.processes
    )
    return update(vsm, calculator=calculator, processes=processes)


def update_connection(
    vsm: ValueStreamMap,
    connection_id: str,
    calculator: Optional[MetricsCalculator] = None,
    **changes: Any,
) -> ValueStreamMap:
    """Apply Connection.updated(**changes) to one connection; unknown ids are a no-op."""
    if vsm.get_connection(connection_id) is None:
        logger.warning("update_connection: no connection with id %s", connection_id)
        return vsm
    connections = tuple(
        c.updated(**changes) if c.id == connection_id else c for c in vsm.connections
    )
    return update(vsm, calculator=calculator, connections=connections)


def remove_process(
    vsm: ValueStreamMap,
    process_id: str,
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    """Drop a process together with every connection touching it."""
    return update(
        vsm,
        calculator=calculator,
        processes=[p for p in vsm.processes if p.id != process_id],
        connections=[
            c for c in vsm.connections
            if c.source_id != process_id and c.target_id != process_id
        ],
    )


def remove_connection(
    vsm: ValueStreamMap,
    connection_id: str,
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    return update(
        vsm,
        calculator=calculator,
        connections=[c for c in vsm.connections if c.id != connection_id],
    )
