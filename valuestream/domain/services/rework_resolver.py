"""
Rework Resolver

Computes the probability-weighted extra time each process incurs when work
is rejected and has to be redone.

A rejection is always detected at one process S and priced with S's
rework probability p = (100 - C/A) / 100. Where the work goes back to
depends on the graph:

    explicit  a rework connection S -> T exists. The work returns to T and
              flows forward along normal connections until it reaches S
              again. Round trip = Σ process times on the walk + Σ waits of
              the connections walked + the rework connection's wait. If the
              walk uses a normal connection T -> S that the rework connection
              reverses, both share one hand-off queue and only the larger
              wait counts. Charged to T.

    implicit  S has no rework connection at all and is not the flow origin:
              S is redone after re-queueing on the hand-off from its
              previous step (nearest incoming-normal source to the left).
              Round trip = that wait + S's process time. Charged to S.

    self      S is the flow origin (no incoming normal connection) and has
              no rework connection: round trip = S's process time.
              Charged to S.

Terminal steps (last but not first) never produce implicit or self rework.
A terminal step with an explicit rework connection is an inspection gate
and its C/A is used for that connection.

Walks carry their own visited set. Revisiting a process truncates that
branch to zero, so cycles in the normal flow terminate. Walk results are
cached per (process, goal) for every process that cannot reach a normal
cycle, where the visited set cannot change the outcome. Among the branches
out of a process the ones that reach S win, then the longest. A walk that
never reaches S ("dead path") keeps what it accumulated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, FrozenSet, Any

from valuestream.domain.models.flow_graph import FlowGraph, ClassifiedConnection
from valuestream.domain.services.flow_status import FlowStatus, get_flow_statuses


class ReworkKind(Enum):
    """How the destination of rejected work was determined."""
    EXPLICIT = "explicit"
    IMPLICIT = "implicit"
    SELF = "self"


@dataclass(frozen=True)
class ReworkPath:
    """
    One priced rework loop.

    Attributes:
        kind: explicit, implicit or self
        source_id: process where the rejection is detected
        target_id: process the work is returned to
        charged_to: process whose rework_cycle_time receives the cost
        process_ids: processes redone, in walk order
        connection_ids: connections walked (normal flow only)
        elapsed: unweighted round-trip time
        probability: rework probability of source_id
        reached: False when the walk never got back to source_id
        rework_connection_id: the rework connection for explicit loops
    """
    kind: ReworkKind
    source_id: str
    target_id: str
    charged_to: str
    process_ids: Tuple[str, ...] = ()
    connection_ids: Tuple[str, ...] = ()
    elapsed: float = 0.0
    probability: float = 0.0
    reached: bool = True
    rework_connection_id: Optional[str] = None

    @property
    def weighted(self) -> float:
        return self.elapsed * self.probability

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "chargedTo": self.charged_to,
            "processIds": list(self.process_ids),
            "connectionIds": list(self.connection_ids),
            "elapsed": self.elapsed,
            "probability": self.probability,
            "weighted": self.weighted,
            "reached": self.reached,
            "reworkConnectionId": self.rework_connection_id,
        }


@dataclass
class ReworkResolution:
    """Result of resolving rework for a whole value stream."""
    rework_cycle_time_by_process: Dict[str, float] = field(default_factory=dict)
    paths: List[ReworkPath] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(self.rework_cycle_time_by_process.values())

    def paths_charged_to(self, process_id: str) -> List[ReworkPath]:
        return [p for p in self.paths if p.charged_to == process_id]


@dataclass(frozen=True)
class _Walk:
    elapsed: float
    reached: bool
    process_ids: Tuple[str, ...] = ()
    connection_ids: Tuple[str, ...] = ()


_TRUNCATED = _Walk(elapsed=0.0, reached=False)


@dataclass
class _WalkCache:
    """Walk results for processes outside the cyclic region of the flow."""
    cyclic_region: FrozenSet[str]
    results: Dict[Tuple[str, str], _Walk] = field(default_factory=dict)

    def get(self, node_id: str, goal_id: str) -> Optional[_Walk]:
        return self.results.get((node_id, goal_id))

    def put(self, node_id: str, goal_id: str, walk: _Walk) -> None:
        if node_id not in self.cyclic_region:
            self.results[(node_id, goal_id)] = walk


class ReworkResolver:
    """Prices every rework loop of a classified value stream."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def resolve(
        self,
        flow: FlowGraph,
        statuses: Optional[Dict[str, FlowStatus]] = None,
    ) -> ReworkResolution:
        statuses = statuses if statuses is not None else get_flow_statuses(flow)
        resolution = ReworkResolution(
            rework_cycle_time_by_process={pid: 0.0 for pid in flow.processes}
        )

        cycle = flow.find_normal_cycle()
        if cycle:
            self._logger.warning(
                "Normal flow contains a cycle (%s); rework walks are truncated on revisit",
                " -> ".join(u for u, _ in cycle),
            )
        cache = _WalkCache(cyclic_region=flow.cyclic_region() if cycle else frozenset())

        for process_id in flow.processes:
            for rework in flow.incoming_rework[process_id]:
                path = self._explicit_path(flow, rework, cache)
                if path is not None:
                    self._charge(resolution, path)

            path = self._implicit_path(flow, process_id, statuses[process_id])
            if path is not None:
                self._charge(resolution, path)

        return resolution

    # ------------------------------------------------------------------
    # Loop pricing
    # ------------------------------------------------------------------

    def _explicit_path(
        self,
        flow: FlowGraph,
        rework: ClassifiedConnection,
        cache: _WalkCache,
    ) -> Optional[ReworkPath]:
        source = flow.processes[rework.source_id]
        probability = source.metrics.rework_probability
        if probability <= 0:
            return None

        walk = self._walk(flow, rework.target_id, rework.source_id, frozenset(), cache)
        if not walk.reached:
            self._logger.debug(
                "Rework %s: no normal path from %s back to %s, using dead path",
                rework.id, rework.target_id, rework.source_id,
            )

        elapsed = walk.elapsed + rework.wait_time
        shared = self._shared_queue(flow, rework, walk)
        if shared is not None:
            elapsed -= min(shared.wait_time, rework.wait_time)

        return ReworkPath(
            kind=ReworkKind.EXPLICIT,
            source_id=rework.source_id,
            target_id=rework.target_id,
            charged_to=rework.target_id,
            process_ids=walk.process_ids,
            connection_ids=walk.connection_ids,
            elapsed=elapsed,
            probability=probability,
            reached=walk.reached,
            rework_connection_id=rework.id,
        )

    def _implicit_path(
        self,
        flow: FlowGraph,
        process_id: str,
        status: FlowStatus,
    ) -> Optional[ReworkPath]:
        process = flow.processes[process_id]
        probability = process.metrics.rework_probability
        if probability <= 0 or status.is_terminal or flow.has_explicit_rework(process_id):
            return None

        if status.is_first:
            return ReworkPath(
                kind=ReworkKind.SELF,
                source_id=process_id,
                target_id=process_id,
                charged_to=process_id,
                process_ids=(process_id,),
                elapsed=process.metrics.process_time,
                probability=probability,
            )

        previous = self._previous_connection(flow, process_id)
        return ReworkPath(
            kind=ReworkKind.IMPLICIT,
            source_id=process_id,
            target_id=previous.source_id,
            charged_to=process_id,
            process_ids=(process_id,),
            connection_ids=(previous.id,),
            elapsed=previous.wait_time + process.metrics.process_time,
            probability=probability,
        )

    def _charge(self, resolution: ReworkResolution, path: ReworkPath) -> None:
        resolution.paths.append(path)
        resolution.rework_cycle_time_by_process[path.charged_to] += path.weighted
        self._logger.debug(
            "%s rework %s -> %s: %.4g x %.4g charged to %s",
            path.kind.value, path.source_id, path.target_id,
            path.elapsed, path.probability, path.charged_to,
        )

    # ------------------------------------------------------------------
    # Graph helpers
    # ------------------------------------------------------------------

    def _walk(
        self,
        flow: FlowGraph,
        node_id: str,
        goal_id: str,
        visited: FrozenSet[str],
        cache: _WalkCache,
    ) -> _Walk:
        """Longest forward walk from node_id, preferring walks that reach goal_id."""
        cached = cache.get(node_id, goal_id)
        if cached is not None:
            return cached

        here = _Walk(
            elapsed=flow.processes[node_id].metrics.process_time,
            reached=node_id == goal_id,
            process_ids=(node_id,),
        )
        if here.reached:
            return here

        visited = visited | {node_id}
        best: Optional[_Walk] = None
        for connection in flow.outgoing_normal[node_id]:
            if connection.target_id in visited:
                self._logger.debug(
                    "Walk revisits %s via %s, truncating branch",
                    connection.target_id, connection.id,
                )
                branch = _TRUNCATED
            else:
                child = self._walk(flow, connection.target_id, goal_id, visited, cache)
                branch = _Walk(
                    elapsed=connection.wait_time + child.elapsed,
                    reached=child.reached,
                    process_ids=child.process_ids,
                    connection_ids=(connection.id,) + child.connection_ids,
                )
            if best is None or (branch.reached, branch.elapsed) > (best.reached, best.elapsed):
                best = branch

        result = here
        if best is not None:
            result = _Walk(
                elapsed=here.elapsed + best.elapsed,
                reached=best.reached,
                process_ids=here.process_ids + best.process_ids,
                connection_ids=best.connection_ids,
            )
        cache.put(node_id, goal_id, result)
        return result

    @staticmethod
    def _shared_queue(
        flow: FlowGraph,
        rework: ClassifiedConnection,
        walk: _Walk,
    ) -> Optional[ClassifiedConnection]:
        """Normal connection target -> source on the walk that the rework connection reverses."""
        for connection in flow.outgoing_normal[rework.target_id]:
            if connection.target_id == rework.source_id and connection.id in walk.connection_ids:
                return connection
        return None

    @staticmethod
    def _previous_connection(flow: FlowGraph, process_id: str) -> ClassifiedConnection:
        """Incoming normal connection from the nearest step to the left."""
        incoming = flow.incoming_normal[process_id]
        x = flow.processes[process_id].position.x

        def source_x(connection: ClassifiedConnection) -> float:
            return flow.processes[connection.source_id].position.x

        left = [c for c in incoming if source_x(c) <= x]
        return max(left or incoming, key=source_x)
