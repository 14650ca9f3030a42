"""
Display Projection

Builds display-ready copies of process blocks: cycle_time and
rework_cycle_time are filled in from the computed metrics and the C/A
figure is cleared on every last step of the normal flow, isolated steps
included. Stored entities are left untouched.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Tuple

from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.value_stream import VSMMetrics
from valuestream.domain.services.edge_classifier import EdgeClassifier
from valuestream.domain.services.flow_status import get_flow_statuses


def project_processes(
    processes: Iterable[ProcessBlock],
    connections: Iterable[Connection],
    metrics: VSMMetrics,
    infer_rework_from_position: bool = True,
) -> Tuple[ProcessBlock, ...]:
    processes = tuple(processes)
    flow = EdgeClassifier(infer_from_position=infer_rework_from_position).classify(
        processes, connections
    )
    statuses = get_flow_statuses(flow)

    projected = []
    for process in processes:
        status = statuses[process.id]
        complete_accurate = None if status.is_last else process.metrics.complete_accurate
        projected.append(replace(
            process,
            metrics=replace(
                process.metrics,
                complete_accurate=complete_accurate,
                cycle_time=metrics.cycle_time_by_process.get(process.id, process.metrics.process_time),
                rework_cycle_time=metrics.rework_cycle_time_by_process.get(process.id, 0.0),
            ),
        ))
    return tuple(projected)
