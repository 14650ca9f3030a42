"""
Unit Tests for edge classification and the flow graph

Tests for:
    - EdgeClassifier: explicit and positional rework classification
    - FlowGraph: adjacency indices, dangling connections, flow order, cycles
    - Flow status: first / last / terminal indicators
"""

import pytest

from valuestream.domain.services import EdgeClassifier, get_flow_status, get_flow_statuses

from conftest import make_process, make_connection


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def processes():
    return [
        make_process("a", 0),
        make_process("b", 200),
        make_process("c", 400),
    ]


# =============================================================================
# Classification
# =============================================================================

class TestEdgeClassifier:

    def test_left_to_right_is_normal(self, processes):
        flow = EdgeClassifier().classify(processes, [make_connection("ab", "a", "b")])
        assert flow.is_rework("ab") is False
        assert [c.id for c in flow.outgoing_normal["a"]] == ["ab"]
        assert [c.id for c in flow.incoming_normal["b"]] == ["ab"]

    def test_right_to_left_is_inferred_rework(self, processes):
        flow = EdgeClassifier().classify(processes, [make_connection("ca", "c", "a")])
        classified = flow.connections[0]
        assert classified.is_rework is True
        assert classified.inferred is True
        assert [c.id for c in flow.outgoing_rework["c"]] == ["ca"]
        assert [c.id for c in flow.incoming_rework["a"]] == ["ca"]

    def test_explicit_flag_overrides_position(self, processes):
        connections = [
            make_connection("ca", "c", "a", is_rework=False),
            make_connection("ab", "a", "b", is_rework=True),
        ]
        flow = EdgeClassifier().classify(processes, connections)
        assert flow.is_rework("ca") is False
        assert flow.is_rework("ab") is True
        assert not any(c.inferred for c in flow.connections)

    def test_inference_can_be_disabled(self, processes):
        flow = EdgeClassifier(infer_from_position=False).classify(
            processes, [make_connection("ca", "c", "a")]
        )
        assert flow.is_rework("ca") is False

    def test_same_x_is_normal(self):
        processes = [make_process("a", 100), make_process("b", 100)]
        flow = EdgeClassifier().classify(processes, [make_connection("ba", "b", "a")])
        assert flow.is_rework("ba") is False

    def test_every_process_has_index_entries(self, processes):
        flow = EdgeClassifier().classify(processes, [])
        for index in (flow.incoming_normal, flow.outgoing_normal,
                      flow.incoming_rework, flow.outgoing_rework):
            assert set(index) == {"a", "b", "c"}
            assert all(v == [] for v in index.values())

    def test_dangling_connection_is_ignored(self, processes):
        dangling = make_connection("ax", "a", "missing")
        flow = EdgeClassifier().classify(processes, [dangling])
        assert flow.dangling == [dangling]
        assert flow.is_rework("ax") is None
        assert flow.outgoing_normal["a"] == []

    def test_caller_connections_are_not_modified(self, processes):
        conn = make_connection("ca", "c", "a")
        EdgeClassifier().classify(processes, [conn])
        assert conn.is_rework is None

    def test_has_explicit_rework(self, processes):
        flow = EdgeClassifier().classify(
            processes, [make_connection("cb", "c", "b", is_rework=True)]
        )
        assert flow.has_explicit_rework("b")
        assert flow.has_explicit_rework("c")
        assert not flow.has_explicit_rework("a")


# =============================================================================
# Flow Graph
# =============================================================================

class TestFlowGraph:

    def test_flow_order_follows_connections(self):
        processes = [make_process("a", 0), make_process("b", 400), make_process("c", 200)]
        connections = [make_connection("ab", "a", "b", is_rework=False),
                       make_connection("bc", "b", "c", is_rework=False)]
        flow = EdgeClassifier().classify(processes, connections)
        assert flow.flow_order() == ["a", "b", "c"]

    def test_flow_order_breaks_ties_left_to_right(self, processes):
        flow = EdgeClassifier().classify(list(reversed(processes)), [])
        assert flow.flow_order() == ["a", "b", "c"]

    def test_acyclic_flow_has_no_cycle(self, processes):
        connections = [make_connection("ab", "a", "b"), make_connection("bc", "b", "c")]
        flow = EdgeClassifier().classify(processes, connections)
        assert flow.find_normal_cycle() == []

    def test_normal_cycle_is_found(self, processes):
        connections = [
            make_connection("ab", "a", "b"),
            make_connection("ba", "b", "a", is_rework=False),
        ]
        flow = EdgeClassifier().classify(processes, connections)
        cycle = flow.find_normal_cycle()
        assert {u for u, _ in cycle} == {"a", "b"}
        # Falls back to positional order
        assert flow.flow_order() == ["a", "b", "c"]

    def test_cyclic_region_includes_upstream_steps(self):
        processes = [make_process("up", 0), make_process("a", 100),
                     make_process("b", 200), make_process("down", 300)]
        connections = [
            make_connection("ua", "up", "a"),
            make_connection("ab", "a", "b"),
            make_connection("ba", "b", "a", is_rework=False),
            make_connection("bd", "b", "down"),
        ]
        flow = EdgeClassifier().classify(processes, connections)
        assert flow.cyclic_region() == {"up", "a", "b"}

    def test_acyclic_flow_has_empty_cyclic_region(self, processes):
        connections = [make_connection("ab", "a", "b"), make_connection("bc", "b", "c")]
        assert EdgeClassifier().classify(processes, connections).cyclic_region() == frozenset()

    def test_normal_graph_excludes_rework(self, processes):
        connections = [make_connection("ab", "a", "b"), make_connection("ba", "b", "a")]
        G = EdgeClassifier().classify(processes, connections).normal_graph()
        assert G.number_of_edges() == 1
        assert G.has_edge("a", "b", key="ab")


# =============================================================================
# Flow Status
# =============================================================================

class TestFlowStatus:

    def test_chain_statuses(self, processes):
        connections = [make_connection("ab", "a", "b"), make_connection("bc", "b", "c")]
        statuses = get_flow_statuses(EdgeClassifier().classify(processes, connections))

        assert statuses["a"].indicator == "first"
        assert statuses["b"].indicator is None
        assert statuses["c"].indicator == "last"
        assert statuses["c"].is_terminal
        assert not statuses["a"].is_terminal

    def test_isolated_process(self, processes):
        flow = EdgeClassifier().classify(processes[:1], [])
        status = get_flow_status(flow, "a")
        assert status.is_isolated
        assert status.indicator == "first-last"
        assert not status.is_terminal

    def test_rework_connections_do_not_affect_status(self, processes):
        connections = [make_connection("ab", "a", "b"), make_connection("ba", "b", "a")]
        statuses = get_flow_statuses(EdgeClassifier().classify(processes, connections))
        assert statuses["a"].is_first
        assert statuses["b"].is_last
