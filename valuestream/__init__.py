"""
Value Stream Metrics Engine

Models a business process as a flow of process steps joined by hand-offs
and computes lead time, value-added ratio, rework time and worst-case lead
time from it.

Usage:
    from valuestream import ProcessBlock, Connection, vsm_mutator

    vsm = vsm_mutator.create(
        id="vsm1",
        title="Order flow",
        processes=[
            ProcessBlock.create("a", "Intake", position={"x": 0, "y": 0},
                                metrics={"processTime": 10}),
            ProcessBlock.create("b", "Review", position={"x": 200, "y": 0},
                                metrics={"processTime": 20}),
        ],
        connections=[Connection.create("c1", "a", "b", metrics={"waitTime": 5})],
    )
    print(vsm.metrics.total_lead_time)   # 35
"""

from .domain.models import (
    Position,
    ProcessMetrics,
    ProcessBlock,
    ConnectionMetrics,
    Connection,
    VSMMetrics,
    ValueStreamMap,
)
from .domain.services import MetricsCalculator, calculate_metrics
from .application import vsm_mutator, VSMStore, create_sample_vsm

__all__ = [
    # Models
    "Position",
    "ProcessMetrics",
    "ProcessBlock",
    "ConnectionMetrics",
    "Connection",
    "VSMMetrics",
    "ValueStreamMap",
    # Engine
    "MetricsCalculator",
    "calculate_metrics",
    # Application
    "vsm_mutator",
    "VSMStore",
    "create_sample_vsm",
]

__version__ = "1.0.0"
