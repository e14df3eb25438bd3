"""
Scene data models for Plan Vision.

Classes:
    Point2D: Real-valued point in image pixel space (origin top-left)
    GraphEdge: One explored transition of a planner's search graph
    GraphVisitor: Callback interface a planner drives while walking its graph
    SceneStyle: Stroke styling for the rendered overlay
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Protocol, Sequence, Union
import math

from PV_Libs.constants import (
    SOLUTION_STROKE,
    SOLUTION_STROKE_WIDTH,
    VISITED_STROKE,
    VISITED_STROKE_WIDTH,
)


def as_coordinate(value: Any) -> float:
    """Convert a coordinate to float, rejecting NaN and infinity."""
    coordinate = float(value)
    if not math.isfinite(coordinate):
        raise ValueError(f"Coordinate must be finite, got {value!r}")
    return coordinate


@dataclass(frozen=True)
class Point2D:
    """Coordinates are stored as finite floats; NaN and infinity raise ValueError."""
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", as_coordinate(self.x))
        object.__setattr__(self, "y", as_coordinate(self.y))

    @classmethod
    def coerce(cls, value: Union["Point2D", Sequence[float]]) -> "Point2D":
        """Accept a Point2D or any ``(x, y)`` sequence (tuple, list, array)."""
        if isinstance(value, Point2D):
            return value
        if len(value) < 2:
            raise ValueError(f"Point needs 2 coordinates, got {value!r}")
        return cls(value[0], value[1])


@dataclass(frozen=True)
class GraphEdge:
    start: Point2D
    end: Point2D

    @classmethod
    def coerce(cls, value: Union["GraphEdge", Sequence[Any]]) -> "GraphEdge":
        """Accept a GraphEdge or a ``(start, end)`` pair of points."""
        if isinstance(value, GraphEdge):
            return value
        start, end = value
        return cls(Point2D.coerce(start), Point2D.coerce(end))


class GraphVisitor(Protocol):
    """Receives a planner's search graph, one vertex or edge at a time."""

    def on_vertex(self, point: Point2D) -> None:
        ...

    def on_edge(self, start: Point2D, end: Point2D) -> None:
        ...


@dataclass
class SceneStyle:
    """Stroke styling for the overlay.

    The solution path is drawn wide and opaque, visited edges thin and
    translucent so the two stay distinguishable.
    """
    solution_stroke: str = SOLUTION_STROKE
    solution_stroke_width: float = SOLUTION_STROKE_WIDTH
    visited_stroke: str = VISITED_STROKE
    visited_stroke_width: float = VISITED_STROKE_WIDTH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneStyle":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
