"""
Edge Classifier

Labels every connection of a value stream as normal flow or rework
(feedback) and builds the adjacency indices the calculators walk.

Classification rules:
    is_rework=True   -> rework
    is_rework=False  -> normal
    is_rework=None   -> rework when the source sits to the right of the
                        target (source.x > target.x), if positional
                        inference is enabled; normal otherwise

Connections whose source or target is unknown are left out of every index
and listed in FlowGraph.dangling. Caller-owned connections are never
modified; the classification lives on ClassifiedConnection.

Usage:
    classifier = EdgeClassifier()
    flow = classifier.classify(processes, connections)
    flow.outgoing_normal["p1"]
"""

from __future__ import annotations

import logging
from typing import Iterable

from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.flow_graph import ClassifiedConnection, FlowGraph


class EdgeClassifier:
    """Builds a FlowGraph from processes and connections."""

    def __init__(self, infer_from_position: bool = True) -> None:
        self.infer_from_position = infer_from_position
        self._logger = logging.getLogger(__name__)

    def classify(
        self,
        processes: Iterable[ProcessBlock],
        connections: Iterable[Connection],
    ) -> FlowGraph:
        flow = FlowGraph()
        for process in processes:
            flow.processes[process.id] = process
            flow.incoming_normal[process.id] = []
            flow.outgoing_normal[process.id] = []
            flow.incoming_rework[process.id] = []
            flow.outgoing_rework[process.id] = []

        for connection in connections:
            source = flow.processes.get(connection.source_id)
            target = flow.processes.get(connection.target_id)
            if source is None or target is None:
                self._logger.debug(
                    "Ignoring connection %s: unknown endpoint %s -> %s",
                    connection.id, connection.source_id, connection.target_id,
                )
                flow.dangling.append(connection)
                continue

            classified = self._classify_one(connection, source, target)
            flow.connections.append(classified)
            if classified.is_rework:
                flow.outgoing_rework[source.id].append(classified)
                flow.incoming_rework[target.id].append(classified)
            else:
                flow.outgoing_normal[source.id].append(classified)
                flow.incoming_normal[target.id].append(classified)

        self._logger.debug(
            "Classified %d connections: %d normal, %d rework, %d dangling",
            len(flow.connections) + len(flow.dangling),
            len(flow.normal_connections()),
            len(flow.rework_connections()),
            len(flow.dangling),
        )
        return flow

    def _classify_one(
        self,
        connection: Connection,
        source: ProcessBlock,
        target: ProcessBlock,
    ) -> ClassifiedConnection:
        if connection.is_rework is not None:
            return ClassifiedConnection(connection, is_rework=connection.is_rework)
        if self.infer_from_position and source.position.x > target.position.x:
            return ClassifiedConnection(connection, is_rework=True, inferred=True)
        return ClassifiedConnection(connection, is_rework=False, inferred=True)
