"""
Metrics Aggregator

Runs the full metrics pipeline for a value stream and sums the per-process
figures into stream-level metrics:

    classify -> cycle times -> rework -> totals

    total_lead_time        = Σ cycle_time
    total_value_added_time = Σ process_time
    value_added_ratio      = value added / lead time   (0 when lead time is 0)
    total_rework_time      = Σ rework_cycle_time
    worst_case_lead_time   = lead time + rework time
    average_lead_time      = worst_case_lead_time

Rework times are already probability-weighted, so the expected lead time
and the worst-case (exception) lead time are the same figure.

Usage:
    metrics = calculate_metrics(processes, connections)
    metrics.worst_case_lead_time
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, TYPE_CHECKING

from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.flow_graph import FlowGraph
from valuestream.domain.models.value_stream import VSMMetrics
from valuestream.domain.services.edge_classifier import EdgeClassifier
from valuestream.domain.services.cycle_time_calculator import CycleTimeCalculator
from valuestream.domain.services.flow_status import FlowStatus, get_flow_statuses
from valuestream.domain.services.rework_resolver import ReworkResolver, ReworkResolution

if TYPE_CHECKING:
    from valuestream.config.settings import Settings


@dataclass
class MetricsAnalysis:
    """Everything the pipeline produced, for reports and inspection."""
    flow: FlowGraph
    statuses: Dict[str, FlowStatus]
    rework: ReworkResolution
    metrics: VSMMetrics


class MetricsCalculator:
    """
    Computes VSMMetrics from processes and connections.

    Stateless apart from its configuration; one instance can serve any
    number of value streams.
    """

    def __init__(self, infer_rework_from_position: bool = True) -> None:
        self.classifier = EdgeClassifier(infer_from_position=infer_rework_from_position)
        self.cycle_times = CycleTimeCalculator()
        self.rework_resolver = ReworkResolver()
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "MetricsCalculator":
        return cls(infer_rework_from_position=settings.infer_rework_from_position)

    def calculate(
        self,
        processes: Iterable[ProcessBlock],
        connections: Iterable[Connection],
    ) -> VSMMetrics:
        return self.analyze(processes, connections).metrics

    def analyze(
        self,
        processes: Iterable[ProcessBlock],
        connections: Iterable[Connection],
    ) -> MetricsAnalysis:
        flow = self.classifier.classify(processes, connections)
        statuses = get_flow_statuses(flow)
        cycle_times = self.cycle_times.calculate(flow)
        rework = self.rework_resolver.resolve(flow, statuses)
        metrics = self._aggregate(flow, statuses, cycle_times, rework.rework_cycle_time_by_process)

        self._logger.info(
            "Metrics: %d processes, lead time %.4g, rework %.4g, worst case %.4g",
            len(flow.processes), metrics.total_lead_time,
            metrics.total_rework_time, metrics.worst_case_lead_time,
        )
        return MetricsAnalysis(flow=flow, statuses=statuses, rework=rework, metrics=metrics)

    # ------------------------------------------------------------------

    @staticmethod
    def _aggregate(
        flow: FlowGraph,
        statuses: Dict[str, FlowStatus],
        cycle_times: Dict[str, float],
        rework_times: Dict[str, float],
    ) -> VSMMetrics:
        total_lead_time = sum(cycle_times.values())
        total_value_added_time = sum(p.metrics.process_time for p in flow.processes.values())
        total_rework_time = sum(rework_times.values())
        worst_case_lead_time = total_lead_time + total_rework_time

        value_added_ratio = (
            total_value_added_time / total_lead_time if total_lead_time > 0 else 0.0
        )

        rated = [
            p.metrics.effective_complete_accurate
            for pid, p in flow.processes.items()
            if not statuses[pid].is_terminal
        ]
        average_complete_accurate = sum(rated) / len(rated) if rated else 100.0

        return VSMMetrics(
            total_lead_time=total_lead_time,
            total_value_added_time=total_value_added_time,
            value_added_ratio=value_added_ratio,
            total_rework_time=total_rework_time,
            worst_case_lead_time=worst_case_lead_time,
            average_lead_time=worst_case_lead_time,
            cycle_time_by_process=dict(cycle_times),
            rework_cycle_time_by_process=dict(rework_times),
            total_wait_time=total_lead_time - total_value_added_time,
            average_complete_accurate=average_complete_accurate,
        )


_default_calculator: Optional[MetricsCalculator] = None


def calculate_metrics(
    processes: Iterable[ProcessBlock],
    connections: Iterable[Connection],
) -> VSMMetrics:
    """Compute metrics with the default configuration."""
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = MetricsCalculator()
    return _default_calculator.calculate(processes, connections)
