"""
Domain Entities

Value types for the elements of a value stream map.

    ProcessBlock : a processing step (vertex)
    Connection   : a directed hand-off between two steps (edge)

Entities are frozen; every update returns a new instance. Serialisation
follows the camelCase interchange format used by editors and file storage:

    ProcessBlock: {id, name, position: {x, y},
                   metrics: {processTime, completeAccurate?, cycleTime?, reworkCycleTime?}}
    Connection:   {id, sourceId, targetId, isRework?, metrics: {waitTime}}
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Union


def _as_number(value: Any) -> float:
    """Coerce a loose numeric input to a float, treating missing/invalid as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0  # NaN -> 0


def _as_optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number == number else None


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class Position:
    """2-D canvas coordinate. Only used to infer flow order."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Position:
        if not data:
            return cls()
        return cls(x=_as_number(data.get("x")), y=_as_number(data.get("y")))


@dataclass(frozen=True)
class ProcessMetrics:
    """
    Timing figures of a single process step.

    Attributes:
        process_time: Time to perform the step once
        complete_accurate: Percentage (0-100) of output that needs no rework.
            None means 100 %.
        cycle_time: Derived, only present on projected views
        rework_cycle_time: Derived, only present on projected views
    """
    process_time: float = 0.0
    complete_accurate: Optional[float] = None
    cycle_time: Optional[float] = None
    rework_cycle_time: Optional[float] = None

    @property
    def effective_complete_accurate(self) -> float:
        return 100.0 if self.complete_accurate is None else self.complete_accurate

    @property
    def rework_probability(self) -> float:
        """Share of output rejected, (100 - C/A) / 100 clamped to [0, 1]."""
        probability = (100.0 - self.effective_complete_accurate) / 100.0
        return min(max(probability, 0.0), 1.0)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"processTime": self.process_time}
        if self.complete_accurate is not None:
            result["completeAccurate"] = self.complete_accurate
        if self.cycle_time is not None:
            result["cycleTime"] = self.cycle_time
        if self.rework_cycle_time is not None:
            result["reworkCycleTime"] = self.rework_cycle_time
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> ProcessMetrics:
        data = data or {}
        return cls(
            process_time=_as_number(data.get("processTime")),
            complete_accurate=_as_optional_number(data.get("completeAccurate")),
            cycle_time=_as_optional_number(data.get("cycleTime")),
            rework_cycle_time=_as_optional_number(data.get("reworkCycleTime")),
        )


@dataclass(frozen=True)
class ConnectionMetrics:
    """Queueing time between the source and target steps."""
    wait_time: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"waitTime": self.wait_time}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> ConnectionMetrics:
        return cls(wait_time=_as_number((data or {}).get("waitTime")))


# =============================================================================
# Entities
# =============================================================================

@dataclass(frozen=True)
class ProcessBlock:
    """A processing step in the value stream."""
    id: str
    name: str
    position: Position = field(default_factory=Position)
    metrics: ProcessMetrics = field(default_factory=ProcessMetrics)
    description: str = ""

    @classmethod
    def create(
        cls,
        id: str,
        name: str = "",
        position: Union[Position, Dict[str, Any], None] = None,
        metrics: Union[ProcessMetrics, Dict[str, Any], None] = None,
        description: str = "",
    ) -> ProcessBlock:
        """
        Build a process block from loose editor input.

        Positions and metrics may be given as dicts in the interchange format
        (``{"processTime": 10, "completeAccurate": 90}``). Derived metrics
        supplied by the caller are discarded.
        """
        if not isinstance(position, Position):
            position = Position.from_dict(position)
        if not isinstance(metrics, ProcessMetrics):
            metrics = ProcessMetrics.from_dict(metrics)
        metrics = replace(metrics, cycle_time=None, rework_cycle_time=None)
        return cls(id=id, name=name or id, position=position,
                   metrics=metrics, description=description)

    def updated(
        self,
        name: Optional[str] = None,
        position: Union[Position, Dict[str, Any], None] = None,
        metrics: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> ProcessBlock:
        """
        Return a copy with the given fields changed.

        ``position`` and ``metrics`` dicts are merged into the current values,
        so ``updated(metrics={"processTime": 5})`` keeps the C/A figure.
        """
        changes: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if description is not None:
            changes["description"] = description
        if position is not None:
            if isinstance(position, Position):
                changes["position"] = position
            else:
                changes["position"] = Position.from_dict({**self.position.to_dict(), **position})
        if metrics is not None:
            merged = ProcessMetrics.from_dict({**self.metrics.to_dict(), **metrics})
            changes["metrics"] = replace(merged, cycle_time=None, rework_cycle_time=None)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "metrics": self.metrics.to_dict(),
        }
        if self.description:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProcessBlock:
        return cls.create(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            position=data.get("position"),
            metrics=data.get("metrics"),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class Connection:
    """
    A directed hand-off between two process steps.

    ``is_rework`` is tri-state: True/False when the editor states the
    classification, None when it should be inferred.
    """
    id: str
    source_id: str
    target_id: str
    metrics: ConnectionMetrics = field(default_factory=ConnectionMetrics)
    is_rework: Optional[bool] = None

    @classmethod
    def create(
        cls,
        id: str,
        source_id: str,
        target_id: str,
        metrics: Union[ConnectionMetrics, Dict[str, Any], None] = None,
        is_rework: Optional[bool] = None,
    ) -> Connection:
        if not isinstance(metrics, ConnectionMetrics):
            metrics = ConnectionMetrics.from_dict(metrics)
        return cls(id=id, source_id=source_id, target_id=target_id,
                   metrics=metrics, is_rework=is_rework)

    def updated(self, **changes: Any) -> Connection:
        """Return a copy with the given fields changed; ``metrics`` dicts are merged."""
        metrics = changes.get("metrics")
        if isinstance(metrics, dict):
            changes["metrics"] = ConnectionMetrics.from_dict({**self.metrics.to_dict(), **metrics})
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "metrics": self.metrics.to_dict(),
        }
        if self.is_rework is not None:
            result["isRework"] = self.is_rework
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Connection:
        is_rework = data.get("isRework")
        return cls.create(
            id=str(data.get("id", "")),
            source_id=str(data.get("sourceId", "")),
            target_id=str(data.get("targetId", "")),
            metrics=data.get("metrics"),
            is_rework=None if is_rework is None else bool(is_rework),
        )
