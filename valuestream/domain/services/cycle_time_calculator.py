"""
Cycle Time Calculator

Best-case cycle time of every process:

    cycle_time(P) = process_time(P) + Σ wait_time(c) for c in incoming_normal(P)

Rework connections do not contribute. A flow origin (no incoming normal
connection) has cycle_time == process_time.
"""

from __future__ import annotations

from typing import Dict

from valuestream.domain.models.flow_graph import FlowGraph


class CycleTimeCalculator:
    """Pure map from a FlowGraph to per-process cycle times."""

    def calculate(self, flow: FlowGraph) -> Dict[str, float]:
        return {
            process_id: self.cycle_time(flow, process_id)
            for process_id in flow.processes
        }

    @staticmethod
    def cycle_time(flow: FlowGraph, process_id: str) -> float:
        process = flow.processes[process_id]
        incoming_wait = sum(c.wait_time for c in flow.incoming_normal.get(process_id, []))
        return process.metrics.process_time + incoming_wait
