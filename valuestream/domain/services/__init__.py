"""
Domain Services Package

The metrics pipeline: edge classification, cycle times, rework resolution
and aggregation, plus the read-only display projection.
"""

from .edge_classifier import EdgeClassifier
from .cycle_time_calculator import CycleTimeCalculator
from .flow_status import FlowStatus, get_flow_status, get_flow_statuses
from .rework_resolver import ReworkResolver, ReworkResolution, ReworkPath, ReworkKind
from .aggregator import MetricsCalculator, MetricsAnalysis, calculate_metrics
from .projection import project_processes

__all__ = [
    # Classification
    "EdgeClassifier",
    # Cycle times
    "CycleTimeCalculator",
    # Flow status
    "FlowStatus",
    "get_flow_status",
    "get_flow_statuses",
    # Rework
    "ReworkResolver",
    "ReworkResolution",
    "ReworkPath",
    "ReworkKind",
    # Aggregation
    "MetricsCalculator",
    "MetricsAnalysis",
    "calculate_metrics",
    # Projection
    "project_processes",
]
