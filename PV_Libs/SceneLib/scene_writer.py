"""
Streaming SVG scene writer for Plan Vision.

Writes an SVG document that overlays planning results on the source image.
The document is emitted incrementally to a text stream in a fixed order:

    open -> [draw_background] -> [draw_solution_path] -> [draw_visited_edges]* -> close

Canvas units are image pixels (1:1, origin top-left). Explored graph edges
are capped per call so huge search trees do not produce unrenderable files;
edges past the cap are dropped without error.

Example:
    >>> with open("scene.svg", "w") as stream:
    ...     writer = VectorSceneWriter(stream)
    ...     writer.open(width, height)
    ...     writer.draw_background("map.png")
    ...     writer.draw_solution_path(solution)
    ...     writer.draw_visited_graph(planner.visit_graph)
    ...     writer.close()

Classes:
    WriterState: Position of the writer in the document
    VectorSceneWriter: Incremental SVG emitter
    EdgeCollector: GraphVisitor that renders edges through a writer
"""

from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence, TextIO
from xml.sax.saxutils import escape
import logging

import svg

from PV_Libs.constants import MAX_VISITED_EDGES, SVG_NAMESPACE
from PV_Libs.SceneLib.scene_models import GraphEdge, GraphVisitor, Point2D, SceneStyle

logger = logging.getLogger(__name__)


class WriterState(Enum):
    UNOPENED = "unopened"
    HEADER_WRITTEN = "header written"
    BACKGROUND_WRITTEN = "background written"
    PATH_WRITTEN = "path written"
    EDGES_WRITTEN = "edges written"
    CLOSED = "closed"


_BODY_STATES = {
    WriterState.HEADER_WRITTEN,
    WriterState.BACKGROUND_WRITTEN,
    WriterState.PATH_WRITTEN,
    WriterState.EDGES_WRITTEN,
}


class VectorSceneWriter:
    """
    Incremental SVG writer for a planning scene.

    Each drawing call is only valid in certain states; calling out of order
    raises RuntimeError instead of producing a malformed document.
    """

    def __init__(
        self,
        stream: TextIO,
        style: Optional[SceneStyle] = None,
        max_edges: int = MAX_VISITED_EDGES,
    ):
        if max_edges < 0:
            raise ValueError(f"max_edges must be non-negative, got {max_edges}")
        self._stream = stream
        self.style = style or SceneStyle()
        self.max_edges = max_edges
        self.state = WriterState.UNOPENED
        self.width = 0
        self.height = 0

    def _require(self, operation: str, allowed: Iterable[WriterState]) -> None:
        if self.state not in allowed:
            raise RuntimeError(f"Cannot {operation}: scene writer is in state '{self.state.value}'")

    def _write_element(self, element: svg.Element) -> None:
        self._stream.write(element.as_str())
        self._stream.write("\n")

    @property
    def is_closed(self) -> bool:
        return self.state is WriterState.CLOSED

    def open(self, width: int, height: int) -> None:
        """
        Write the document header for a ``width`` x ``height`` canvas.

        Raises:
            ValueError: If a dimension is negative
            RuntimeError: If the document was already opened
        """
        self._require("open", {WriterState.UNOPENED})
        if width < 0 or height < 0:
            raise ValueError(f"Canvas dimensions must be non-negative, got {width}x{height}")

        self.width = width
        self.height = height
        self._stream.write('<?xml version="1.0" encoding="UTF-8"?>\n')
        self._stream.write(
            f'<svg xmlns="{SVG_NAMESPACE}" width="{width}" height="{height}" viewBox="0 0 {width} {height}">\n'
        )
        self.state = WriterState.HEADER_WRITTEN

    def draw_background(self, image_path: str) -> None:
        """Reference the source image so it fills the whole canvas.

        The path is XML-escaped; svg.py writes attribute values verbatim.
        """
        self._require("draw background", {WriterState.HEADER_WRITTEN})
        self._write_element(
            svg.Image(
                x=0,
                y=0,
                width=self.width,
                height=self.height,
                href=escape(str(image_path), {'"': "&quot;"}),
            )
        )
        self.state = WriterState.BACKGROUND_WRITTEN

    def draw_solution_path(self, path: Sequence[Any]) -> bool:
        """
        Draw the solution as one polyline through all points, in order.

        Args:
            path: Sequence of Point2D or (x, y) pairs in pixel coordinates

        Returns:
            True if a polyline was written, False for paths with fewer than
            two points (nothing to connect)
        """
        self._require(
            "draw solution path",
            {WriterState.HEADER_WRITTEN, WriterState.BACKGROUND_WRITTEN},
        )
        points = [Point2D.coerce(point) for point in path]
        self.state = WriterState.PATH_WRITTEN

        if len(points) < 2:
            logger.debug(f"Solution path has {len(points)} point(s), nothing to draw")
            return False

        coordinates = []
        for point in points:
            coordinates.extend((point.x, point.y))

        self._write_element(
            svg.Polyline(
                points=coordinates,
                fill="none",
                stroke=self.style.solution_stroke,
                stroke_width=self.style.solution_stroke_width,
            )
        )
        return True

    def draw_edge(self, start: Point2D, end: Point2D) -> None:
        """Draw a single visited edge, bypassing the edge cap."""
        self._require("draw visited edges", _BODY_STATES)
        self._write_element(
            svg.Line(
                x1=start.x,
                y1=start.y,
                x2=end.x,
                y2=end.y,
                stroke=self.style.visited_stroke,
                stroke_width=self.style.visited_stroke_width,
            )
        )
        self.state = WriterState.EDGES_WRITTEN

    def edge_collector(self, max_edges: Optional[int] = None) -> "EdgeCollector":
        """Create a GraphVisitor that renders edges through this writer."""
        self._require("draw visited edges", _BODY_STATES)
        cap = self.max_edges if max_edges is None else max_edges
        return EdgeCollector(self, cap)

    def draw_visited_edges(self, edges: Iterable[Any], max_edges: Optional[int] = None) -> int:
        """
        Draw explored graph edges as line segments in delivery order.

        Once ``max_edges`` segments have been drawn during this call, the
        remaining edges are consumed and dropped.

        Args:
            edges: Iterable of GraphEdge or (start, end) point pairs
            max_edges: Cap for this call (default: the writer's max_edges)

        Returns:
            Number of segments written
        """
        collector = self.edge_collector(max_edges)
        for edge in edges:
            edge = GraphEdge.coerce(edge)
            collector.on_edge(edge.start, edge.end)
        collector.finish()
        self.state = WriterState.EDGES_WRITTEN
        return collector.rendered

    def draw_visited_graph(
        self,
        traverse: Callable[[GraphVisitor], None],
        max_edges: Optional[int] = None,
    ) -> int:
        """
        Let a planner push its search graph into the document.

        Args:
            traverse: Callable that walks the graph and calls ``on_vertex`` /
                      ``on_edge`` on the visitor it is given
                      (e.g. ``planner.visit_graph``)
            max_edges: Cap for this traversal (default: the writer's max_edges)

        Returns:
            Number of segments written
        """
        collector = self.edge_collector(max_edges)
        traverse(collector)
        collector.finish()
        self.state = WriterState.EDGES_WRITTEN
        return collector.rendered

    def close(self) -> None:
        """Write the document footer. No further writes are accepted."""
        self._require("close", _BODY_STATES)
        self._stream.write("</svg>\n")
        self._stream.flush()
        self.state = WriterState.CLOSED


class EdgeCollector:
    """
    GraphVisitor that renders each edge immediately through a writer.

    Counts rendered edges and drops everything past its cap.
    """

    def __init__(self, writer: VectorSceneWriter, max_edges: int):
        self.writer = writer
        self.max_edges = max_edges
        self.rendered = 0
        self.dropped = 0
        self.vertices = 0

    def on_vertex(self, point: Point2D) -> None:
        self.vertices += 1

    def on_edge(self, start: Any, end: Any) -> None:
        if self.rendered >= self.max_edges:
            self.dropped += 1
            return
        self.writer.draw_edge(Point2D.coerce(start), Point2D.coerce(end))
        self.rendered += 1

    def finish(self) -> None:
        if self.dropped:
            logger.debug(
                f"Rendered {self.rendered} visited edges, dropped {self.dropped} past the cap of {self.max_edges}"
            )
