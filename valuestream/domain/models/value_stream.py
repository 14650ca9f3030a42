"""
Value Stream Map Aggregate

The aggregate root (ValueStreamMap) and the stream-level metrics computed
for it (VSMMetrics).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple, Optional

from .entities import ProcessBlock, Connection


@dataclass(frozen=True)
class VSMMetrics:
    """
    Stream-level metrics.

    Attributes:
        total_lead_time: Σ cycle time, best case without rework
        total_value_added_time: Σ process time
        value_added_ratio: value added / lead time (0 for an empty stream)
        total_rework_time: Σ probability-weighted rework time
        worst_case_lead_time: lead time + rework time
        average_lead_time: expected lead time; equal to worst_case_lead_time
            because rework times are already probability-weighted
        cycle_time_by_process: process id -> cycle time
        rework_cycle_time_by_process: process id -> weighted rework time
        total_wait_time: Σ normal wait time counted in cycle times
        average_complete_accurate: mean C/A of the steps that carry one
    """
    total_lead_time: float = 0.0
    total_value_added_time: float = 0.0
    value_added_ratio: float = 0.0
    total_rework_time: float = 0.0
    worst_case_lead_time: float = 0.0
    average_lead_time: float = 0.0
    cycle_time_by_process: Dict[str, float] = field(default_factory=dict)
    rework_cycle_time_by_process: Dict[str, float] = field(default_factory=dict)
    total_wait_time: float = 0.0
    average_complete_accurate: float = 100.0

    @property
    def flow_efficiency(self) -> float:
        """Value-added ratio as a percentage."""
        return self.value_added_ratio * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLeadTime": self.total_lead_time,
            "totalValueAddedTime": self.total_value_added_time,
            "valueAddedRatio": self.value_added_ratio,
            "totalReworkTime": self.total_rework_time,
            "worstCaseLeadTime": self.worst_case_lead_time,
            "averageLeadTime": self.average_lead_time,
            "cycleTimeByProcess": dict(self.cycle_time_by_process),
            "reworkCycleTimeByProcess": dict(self.rework_cycle_time_by_process),
            "totalWaitTime": self.total_wait_time,
            "averageCompleteAccurate": self.average_complete_accurate,
        }


@dataclass(frozen=True)
class ValueStreamMap:
    """
    Aggregate root: the processes and connections of one value stream plus
    the metrics computed from them.

    Instances are built by ``valuestream.application.vsm_mutator`` which keeps
    ``metrics`` consistent with the collections.
    """
    id: str
    title: str
    processes: Tuple[ProcessBlock, ...] = ()
    connections: Tuple[Connection, ...] = ()
    metrics: VSMMetrics = field(default_factory=VSMMetrics)

    def get_process(self, process_id: str) -> Optional[ProcessBlock]:
        for process in self.processes:
            if process.id == process_id:
                return process
        return None

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        for connection in self.connections:
            if connection.id == connection_id:
                return connection
        return None

    def display_processes(self, infer_rework_from_position: bool = True) -> Tuple[ProcessBlock, ...]:
        """Read-only view of the processes with derived metrics merged in."""
        from valuestream.domain.services.projection import project_processes
        return project_processes(
            self.processes, self.connections, self.metrics,
            infer_rework_from_position=infer_rework_from_position,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "processes": [p.to_dict() for p in self.processes],
            "connections": [c.to_dict() for c in self.connections],
            "metrics": self.metrics.to_dict(),
        }
