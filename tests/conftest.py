"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the value stream metrics engine.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "rework"        # Run only rework tests
"""

import pytest
from pathlib import Path
from typing import Dict, Any, List, Optional

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from valuestream.domain.models import ProcessBlock, Connection


# =============================================================================
# Builders
# =============================================================================

def make_process(
    id: str,
    x: float,
    process_time: float = 10,
    complete_accurate: Optional[float] = None,
) -> ProcessBlock:
    metrics: Dict[str, Any] = {"processTime": process_time}
    if complete_accurate is not None:
        metrics["completeAccurate"] = complete_accurate
    return ProcessBlock.create(id=id, name=id.upper(), position={"x": x, "y": 100}, metrics=metrics)


def make_connection(
    id: str,
    source_id: str,
    target_id: str,
    wait_time: float = 0,
    is_rework: Optional[bool] = None,
) -> Connection:
    return Connection.create(
        id=id,
        source_id=source_id,
        target_id=target_id,
        metrics={"waitTime": wait_time},
        is_rework=is_rework,
    )


def chain(
    count: int,
    process_time: float = 10,
    wait_time: float = 5,
    spacing: float = 150,
) -> Dict[str, List[Any]]:
    """p1 -> p2 -> ... -> pN laid out left to right."""
    processes = [make_process(f"p{i}", i * spacing, process_time) for i in range(1, count + 1)]
    connections = [
        make_connection(f"c{i}", f"p{i}", f"p{i + 1}", wait_time)
        for i in range(1, count)
    ]
    return {"processes": processes, "connections": connections}


# =============================================================================
# Value Stream Fixtures
# =============================================================================

@pytest.fixture
def linear_stream():
    """A(10) -5-> B(20) -10-> C(30), no rework."""
    processes = [
        make_process("A", 0, 10),
        make_process("B", 200, 20),
        make_process("C", 400, 30),
    ]
    connections = [
        make_connection("ab", "A", "B", 5),
        make_connection("bc", "B", "C", 10),
    ]
    return processes, connections


@pytest.fixture
def four_step_chain():
    """Four steps of 10 with waits of 5 between them."""
    data = chain(4)
    return data["processes"], data["connections"]


@pytest.fixture
def implicit_rework_stream():
    """
    Four steps without rework connections, every non-terminal step rated.

        step1(10, 90%) -5-> step2(20, 80%) -10-> step3(30, 70%) -5-> step4(5)
    """
    processes = [
        make_process("step1", 100, 10, 90),
        make_process("step2", 300, 20, 80),
        make_process("step3", 500, 30, 70),
        make_process("step4", 700, 5),
    ]
    connections = [
        make_connection("c12", "step1", "step2", 5),
        make_connection("c23", "step2", "step3", 10),
        make_connection("c34", "step3", "step4", 5),
    ]
    return processes, connections


@pytest.fixture
def explicit_rework_stream():
    """
    Four steps with a step3 -> step1 rework connection.

        step1(10, 90%) -5-> step2(20, 80%) -10-> step3(30, 70%) -10-> step4(10)
          ^------------------ rework, wait 15 -------'
    """
    processes = [
        make_process("step1", 100, 10, 90),
        make_process("step2", 250, 20, 80),
        make_process("step3", 400, 30, 70),
        make_process("step4", 550, 10),
    ]
    connections = [
        make_connection("c12", "step1", "step2", 5),
        make_connection("c23", "step2", "step3", 10),
        make_connection("c34", "step3", "step4", 10),
        make_connection("rework31", "step3", "step1", 15, is_rework=True),
    ]
    return processes, connections


@pytest.fixture
def vsm_document() -> Dict[str, Any]:
    """Interchange document with a stored (stale) metrics block."""
    return {
        "id": "doc1",
        "title": "Order Flow",
        "processes": [
            {"id": "a", "name": "Intake", "position": {"x": 0, "y": 0},
             "metrics": {"processTime": 10, "completeAccurate": 90}},
            {"id": "b", "name": "Review", "position": {"x": 200, "y": 0},
             "metrics": {"processTime": 20, "cycleTime": 999}},
        ],
        "connections": [
            {"id": "ab", "sourceId": "a", "targetId": "b",
             "metrics": {"waitTime": 5}, "isRework": False},
        ],
        "metrics": {"totalLeadTime": 12345},
    }
