"""
Unit Tests for valuestream.domain.models

Tests for:
    - ProcessBlock / Connection factories and serialisation
    - Loose numeric input normalisation
    - Immutability of entities
"""

import pytest
from dataclasses import FrozenInstanceError

from valuestream.domain.models import (
    Position,
    ProcessMetrics,
    ProcessBlock,
    ConnectionMetrics,
    Connection,
    VSMMetrics,
)


# =============================================================================
# ProcessMetrics
# =============================================================================

class TestProcessMetrics:

    def test_missing_complete_accurate_means_no_rework(self):
        metrics = ProcessMetrics(process_time=10)
        assert metrics.effective_complete_accurate == 100.0
        assert metrics.rework_probability == 0.0

    def test_rework_probability(self):
        assert ProcessMetrics(10, complete_accurate=85).rework_probability == pytest.approx(0.15)

    @pytest.mark.parametrize("complete_accurate,expected", [
        (150, 0.0),
        (-20, 1.0),
        (0, 1.0),
    ])
    def test_rework_probability_is_clamped(self, complete_accurate, expected):
        metrics = ProcessMetrics(10, complete_accurate=complete_accurate)
        assert metrics.rework_probability == expected

    def test_from_dict_normalises_invalid_numbers(self):
        metrics = ProcessMetrics.from_dict({"processTime": "abc", "completeAccurate": float("nan")})
        assert metrics.process_time == 0.0
        assert metrics.complete_accurate is None

    def test_from_dict_accepts_numeric_strings(self):
        metrics = ProcessMetrics.from_dict({"processTime": "12.5", "completeAccurate": "90"})
        assert metrics.process_time == 12.5
        assert metrics.complete_accurate == 90.0

    def test_to_dict_omits_unset_fields(self):
        assert ProcessMetrics(5).to_dict() == {"processTime": 5}


# =============================================================================
# ProcessBlock
# =============================================================================

class TestProcessBlock:

    def test_create_from_loose_input(self):
        block = ProcessBlock.create(
            "p1",
            "Intake",
            position={"x": 100, "y": 50},
            metrics={"processTime": 10, "completeAccurate": 90},
        )
        assert block.position == Position(100, 50)
        assert block.metrics.process_time == 10
        assert block.metrics.complete_accurate == 90

    def test_create_discards_derived_metrics(self):
        block = ProcessBlock.create(
            "p1", metrics={"processTime": 10, "cycleTime": 99, "reworkCycleTime": 7}
        )
        assert block.metrics.cycle_time is None
        assert block.metrics.rework_cycle_time is None

    def test_name_defaults_to_id(self):
        assert ProcessBlock.create("p1").name == "p1"

    def test_missing_position_defaults_to_origin(self):
        assert ProcessBlock.create("p1").position == Position(0.0, 0.0)

    def test_is_frozen(self):
        block = ProcessBlock.create("p1")
        with pytest.raises(FrozenInstanceError):
            block.name = "changed"

    def test_updated_merges_metrics(self):
        block = ProcessBlock.create("p1", metrics={"processTime": 10, "completeAccurate": 90})
        updated = block.updated(metrics={"processTime": 20})

        assert updated.metrics.process_time == 20
        assert updated.metrics.complete_accurate == 90
        assert block.metrics.process_time == 10

    def test_updated_merges_position(self):
        block = ProcessBlock.create("p1", position={"x": 10, "y": 20})
        assert block.updated(position={"x": 30}).position == Position(30, 20)

    def test_round_trip_preserves_fields(self):
        data = {
            "id": "p1",
            "name": "Intake",
            "position": {"x": 10.0, "y": 20.0},
            "metrics": {"processTime": 10.0, "completeAccurate": 95.0},
            "description": "first step",
        }
        assert ProcessBlock.from_dict(data).to_dict() == data


# =============================================================================
# Connection
# =============================================================================

class TestConnection:

    def test_create(self):
        conn = Connection.create("c1", "a", "b", metrics={"waitTime": 5})
        assert conn.metrics == ConnectionMetrics(5.0)
        assert conn.is_rework is None

    def test_negative_wait_is_kept(self):
        conn = Connection.create("c1", "a", "b", metrics={"waitTime": -3})
        assert conn.metrics.wait_time == -3.0

    def test_missing_wait_is_zero(self):
        assert Connection.create("c1", "a", "b").metrics.wait_time == 0.0

    def test_updated_merges_metrics(self):
        conn = Connection.create("c1", "a", "b", metrics={"waitTime": 5})
        updated = conn.updated(metrics={"waitTime": 8}, is_rework=True)
        assert updated.metrics.wait_time == 8.0
        assert updated.is_rework is True
        assert conn.is_rework is None

    def test_to_dict_uses_camel_case(self):
        conn = Connection.create("c1", "a", "b", metrics={"waitTime": 5}, is_rework=False)
        assert conn.to_dict() == {
            "id": "c1",
            "sourceId": "a",
            "targetId": "b",
            "metrics": {"waitTime": 5.0},
            "isRework": False,
        }

    def test_to_dict_omits_unset_rework_flag(self):
        assert "isRework" not in Connection.create("c1", "a", "b").to_dict()

    def test_from_dict(self):
        conn = Connection.from_dict({
            "id": "r1", "sourceId": "b", "targetId": "a",
            "metrics": {"waitTime": 2}, "isRework": True,
        })
        assert (conn.source_id, conn.target_id, conn.is_rework) == ("b", "a", True)


# =============================================================================
# VSMMetrics
# =============================================================================

class TestVSMMetrics:

    def test_flow_efficiency(self):
        assert VSMMetrics(value_added_ratio=0.25).flow_efficiency == pytest.approx(25.0)

    def test_to_dict_keys(self):
        data = VSMMetrics().to_dict()
        assert set(data) == {
            "totalLeadTime", "totalValueAddedTime", "valueAddedRatio",
            "totalReworkTime", "worstCaseLeadTime", "averageLeadTime",
            "cycleTimeByProcess", "reworkCycleTimeByProcess",
            "totalWaitTime", "averageCompleteAccurate",
        }
