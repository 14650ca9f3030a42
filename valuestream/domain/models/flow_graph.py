"""
Flow Graph

Arena of processes indexed by id plus the adjacency lists produced by the
edge classifier. Built once per metrics computation and only read after.

Indices (every known process id is a key, lists may be empty):
    incoming_normal / outgoing_normal : forward flow
    incoming_rework / outgoing_rework : feedback loops
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

import networkx as nx

from .entities import ProcessBlock, Connection


@dataclass(frozen=True)
class ClassifiedConnection:
    """A connection annotated with its classification."""
    connection: Connection
    is_rework: bool
    inferred: bool = False  # not stated on the connection

    @property
    def id(self) -> str:
        return self.connection.id

    @property
    def source_id(self) -> str:
        return self.connection.source_id

    @property
    def target_id(self) -> str:
        return self.connection.target_id

    @property
    def wait_time(self) -> float:
        return self.connection.metrics.wait_time


@dataclass
class FlowGraph:
    """Classified view of a value stream's connections."""
    processes: Dict[str, ProcessBlock] = field(default_factory=dict)
    connections: List[ClassifiedConnection] = field(default_factory=list)
    incoming_normal: Dict[str, List[ClassifiedConnection]] = field(default_factory=dict)
    outgoing_normal: Dict[str, List[ClassifiedConnection]] = field(default_factory=dict)
    incoming_rework: Dict[str, List[ClassifiedConnection]] = field(default_factory=dict)
    outgoing_rework: Dict[str, List[ClassifiedConnection]] = field(default_factory=dict)
    dangling: List[Connection] = field(default_factory=list)

    # -- convenience queries --------------------------------------------------

    def is_rework(self, connection_id: str) -> Optional[bool]:
        """Classification of a connection, None if it was dropped as dangling."""
        for classified in self.connections:
            if classified.id == connection_id:
                return classified.is_rework
        return None

    def rework_connections(self) -> List[ClassifiedConnection]:
        return [c for c in self.connections if c.is_rework]

    def normal_connections(self) -> List[ClassifiedConnection]:
        return [c for c in self.connections if not c.is_rework]

    def has_explicit_rework(self, process_id: str) -> bool:
        """True when a rework connection starts or ends at the process."""
        return bool(self.incoming_rework.get(process_id) or self.outgoing_rework.get(process_id))

    # -- networkx view --------------------------------------------------------

    def normal_graph(self) -> nx.MultiDiGraph:
        """Normal-flow edges as a MultiDiGraph keyed by connection id."""
        G = nx.MultiDiGraph()
        for process_id, process in self.processes.items():
            G.add_node(process_id, name=process.name, x=process.position.x)
        for classified in self.normal_connections():
            G.add_edge(
                classified.source_id,
                classified.target_id,
                key=classified.id,
                wait_time=classified.wait_time,
            )
        return G

    def find_normal_cycle(self) -> List[Tuple[str, str]]:
        """Edges of one cycle in the normal flow, empty if the flow is acyclic."""
        G = self.normal_graph()
        if nx.is_directed_acyclic_graph(G):
            return []
        return [(u, v) for u, v, *_ in nx.find_cycle(G)]

    def cyclic_region(self) -> FrozenSet[str]:
        """Process ids on a normal-flow cycle or able to reach one."""
        G = self.normal_graph()
        on_cycle: Set[str] = set()
        for component in nx.strongly_connected_components(G):
            node = next(iter(component))
            if len(component) > 1 or G.has_edge(node, node):
                on_cycle |= component

        region = set(on_cycle)
        for node in on_cycle:
            region |= nx.ancestors(G, node)
        return frozenset(region)

    def flow_order(self) -> List[str]:
        """
        Process ids in flow order.

        Topological order of the normal flow with ties broken left to right;
        falls back to plain left-to-right order when the flow has a cycle.
        """
        G = self.normal_graph()

        def x_key(process_id: str) -> Tuple[float, str]:
            return (self.processes[process_id].position.x, process_id)

        if nx.is_directed_acyclic_graph(G):
            return list(nx.lexicographical_topological_sort(G, key=x_key))
        return sorted(self.processes, key=x_key)
