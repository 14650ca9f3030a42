"""
Flow Status

Position of a process in the normal flow:

    first      no incoming normal connection (flow origin)
    last       no outgoing normal connection
    first-last both: an isolated step
    terminal   last but not first: the end of a flow

Terminal steps cannot be reworked forward, so their C/A figure is ignored
by the rework resolver. An isolated step is its own flow origin and keeps
it for rework; the display projection hides the C/A of every last step.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional

from valuestream.domain.models.flow_graph import FlowGraph


@dataclass(frozen=True)
class FlowStatus:
    """Where a process sits in the normal flow."""
    is_first: bool
    is_last: bool

    @property
    def is_terminal(self) -> bool:
        return self.is_last and not self.is_first

    @property
    def is_isolated(self) -> bool:
        return self.is_first and self.is_last

    @property
    def indicator(self) -> Optional[str]:
        """Short label for renderers: first, last, first-last or None."""
        if self.is_isolated:
            return "first-last"
        if self.is_first:
            return "first"
        if self.is_last:
            return "last"
        return None


def get_flow_status(flow: FlowGraph, process_id: str) -> FlowStatus:
    return FlowStatus(
        is_first=not flow.incoming_normal.get(process_id),
        is_last=not flow.outgoing_normal.get(process_id),
    )


def get_flow_statuses(flow: FlowGraph) -> Dict[str, FlowStatus]:
    return {process_id: get_flow_status(flow, process_id) for process_id in flow.processes}
