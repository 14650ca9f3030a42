"""
VSM File Loader

Reads value stream documents in the camelCase interchange format from JSON
or YAML files and turns them into ValueStreamMap values with metrics
computed. Stored metrics in the document are ignored and recomputed.

    {
      "id": "vsm1",
      "title": "Order fulfilment",
      "processes":   [{"id": "p1", "name": "Pick", "position": {"x": 0, "y": 0},
                       "metrics": {"processTime": 10, "completeAccurate": 95}}],
      "connections": [{"id": "c1", "sourceId": "p1", "targetId": "p2",
                       "metrics": {"waitTime": 5}, "isRework": false}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from valuestream.application import vsm_mutator
from valuestream.domain.models.entities import ProcessBlock, Connection
from valuestream.domain.models.value_stream import ValueStreamMap
from valuestream.domain.services.aggregator import MetricsCalculator

logger = logging.getLogger(__name__)

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def vsm_from_dict(
    data: Dict[str, Any],
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    """Build a ValueStreamMap from an interchange document."""
    if not isinstance(data, dict):
        raise ValueError("VSM document must be a mapping")
    processes = [ProcessBlock.from_dict(p) for p in data.get("processes") or []]
    connections = [Connection.from_dict(c) for c in data.get("connections") or []]
    return vsm_mutator.create(
        id=str(data.get("id", "vsm")),
        title=str(data.get("title", "")),
        processes=processes,
        connections=connections,
        calculator=calculator,
    )


def load_vsm(
    filepath: Union[str, Path],
    calculator: Optional[MetricsCalculator] = None,
) -> ValueStreamMap:
    """
    Load a VSM document from a JSON or YAML file.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: unsupported suffix or malformed document
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = path.suffix.lower()
    logger.info("Loading VSM from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        if suffix in JSON_SUFFIXES:
            data = json.load(f)
        elif suffix in YAML_SUFFIXES:
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported file type: {suffix or '(none)'}")

    return vsm_from_dict(data, calculator=calculator)


def dump_vsm(vsm: ValueStreamMap, indent: int = 2) -> str:
    """Serialise a ValueStreamMap, metrics included, as JSON text."""
    return json.dumps(vsm.to_dict(), indent=indent)
