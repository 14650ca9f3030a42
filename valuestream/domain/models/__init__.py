"""
Domain Models Package

Value types for value stream maps. No computation lives here.
Re-exports all domain models for convenient imports.
"""

from .entities import Position, ProcessMetrics, ProcessBlock, ConnectionMetrics, Connection
from .value_stream import VSMMetrics, ValueStreamMap
from .flow_graph import ClassifiedConnection, FlowGraph

__all__ = [
    # Entities
    "Position", "ProcessMetrics", "ProcessBlock",
    "ConnectionMetrics", "Connection",
    # Aggregate
    "VSMMetrics", "ValueStreamMap",
    # Classified graph
    "ClassifiedConnection", "FlowGraph",
]
