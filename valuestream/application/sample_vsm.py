"""
Sample Value Stream

A five-step software delivery stream with a Testing -> Development rework
loop, used by the CLI (--sample) and as a starting point for new maps.

    Customer Request -> Analysis -> Development -> Testing -> Deployment
                                        ^-------------'
"""

from typing import Optional

from valuestream.application import vsm_mutator
from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.value_stream import ValueStreamMap
from valuestream.domain.services.aggregator import MetricsCalculator

BLOCK_SPACING = 250
START_X = 50
BASE_Y = 100

SAMPLE_STEPS = [
    # (id, name, process time, complete & accurate %)
    ("process1", "Customer Request", 10, 100),
    ("process2", "Analysis", 30, 90),
    ("process3", "Development", 60, 85),
    ("process4", "Testing", 40, 95),
    ("process5", "Deployment", 20, 98),
]

SAMPLE_WAITS = [5, 15, 20, 10]


def create_sample_vsm(calculator: Optional[MetricsCalculator] = None) -> ValueStreamMap:
    """Build the sample stream; metrics come from ``calculator`` or the default configuration."""
    processes = [
        ProcessBlock.create(
            id=step_id,
            name=name,
            position={"x": START_X + BLOCK_SPACING * i, "y": BASE_Y},
            metrics={"processTime": process_time, "completeAccurate": complete_accurate},
        )
        for i, (step_id, name, process_time, complete_accurate) in enumerate(SAMPLE_STEPS)
    ]

    connections = [
        Connection.create(
            id=f"conn{i + 1}",
            source_id=SAMPLE_STEPS[i][0],
            target_id=SAMPLE_STEPS[i + 1][0],
            metrics={"waitTime": wait},
            is_rework=False,
        )
        for i, wait in enumerate(SAMPLE_WAITS)
    ]
    connections.append(Connection.create(
        id="rework1",
        source_id="process4",  # Testing
        target_id="process3",  # back to Development
        metrics={"waitTime": 5},
        is_rework=True,
    ))

    return vsm_mutator.create(
        id="vsm1",
        title="Software Development Value Stream",
        processes=processes,
        connections=connections,
        calculator=calculator,
    )
