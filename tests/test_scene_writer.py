"""
Tests for the streaming SVG scene writer.

Tests cover:
- Document framing (header, footer)
- Background reference
- Solution polyline
- Visited edge rendering and the edge cap
- Push-style graph traversal
- Out-of-order call rejection
"""

import io
import re
import unittest
import xml.etree.ElementTree as ET
from unittest.mock import Mock

import pytest

from PV_Libs.SceneLib.scene_models import GraphEdge, Point2D, SceneStyle, as_coordinate
from PV_Libs.SceneLib.scene_writer import EdgeCollector, VectorSceneWriter, WriterState


def _floats(text):
    return [float(value) for value in re.split(r"[\s,]+", text.strip()) if value]


def _polyline_points(document):
    match = re.search(r'<polyline[^>]*\bpoints="([^"]*)"', document)
    assert match is not None, "no polyline in document"
    values = _floats(match.group(1))
    return list(zip(values[0::2], values[1::2]))


def _line_segments(document):
    segments = []
    for tag in re.findall(r"<line\b[^>]*>", document):
        coords = {}
        for name in ("x1", "y1", "x2", "y2"):
            coords[name] = float(re.search(rf'\b{name}="([^"]*)"', tag).group(1))
        segments.append(((coords["x1"], coords["y1"]), (coords["x2"], coords["y2"])))
    return segments


def _edges(count):
    return [GraphEdge(Point2D(float(i), 0.0), Point2D(float(i), 1.0)) for i in range(count)]


class TestDocumentFraming(unittest.TestCase):
    """Test header, footer and the full example scene."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)

    def test_header_declares_canvas(self):
        self.writer.open(100, 80)
        header = self.stream.getvalue()

        self.assertIn("<svg", header)
        self.assertIn('width="100"', header)
        self.assertIn('height="80"', header)
        self.assertIn('viewBox="0 0 100 80"', header)
        self.assertEqual(self.writer.state, WriterState.HEADER_WRITTEN)

    def test_full_scene(self):
        """100x100 canvas, background, three point path, no edges."""
        self.writer.open(100, 100)
        self.writer.draw_background("map.png")
        drawn = self.writer.draw_solution_path([(0, 0), (50, 50), (99, 99)])
        self.writer.close()
        document = self.stream.getvalue()

        self.assertTrue(drawn)
        self.assertEqual(document.count("<image"), 1)
        self.assertIn("map.png", document)
        self.assertEqual(document.count("<polyline"), 1)
        self.assertEqual(_polyline_points(document), [(0.0, 0.0), (50.0, 50.0), (99.0, 99.0)])
        self.assertEqual(_line_segments(document), [])
        self.assertTrue(document.rstrip().endswith("</svg>"))
        self.assertEqual(document.count("</svg>"), 1)
        self.assertTrue(self.writer.is_closed)

    def test_writes_rejected_after_close(self):
        self.writer.open(10, 10)
        self.writer.close()

        with self.assertRaises(RuntimeError):
            self.writer.draw_visited_edges(_edges(1))
        with self.assertRaises(RuntimeError):
            self.writer.draw_solution_path([(0, 0), (1, 1)])
        with self.assertRaises(RuntimeError):
            self.writer.close()
        with self.assertRaises(RuntimeError):
            self.writer.open(10, 10)

    def test_negative_canvas_rejected(self):
        with self.assertRaises(ValueError):
            self.writer.open(-1, 10)


class TestCallOrder(unittest.TestCase):
    """Test the writer's state machine."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)

    def test_body_before_header_rejected(self):
        with self.assertRaises(RuntimeError):
            self.writer.draw_background("map.png")
        with self.assertRaises(RuntimeError):
            self.writer.draw_solution_path([(0, 0), (1, 1)])
        with self.assertRaises(RuntimeError):
            self.writer.draw_visited_edges(_edges(1))
        with self.assertRaises(RuntimeError):
            self.writer.close()
        self.assertEqual(self.stream.getvalue(), "")

    def test_double_open_rejected(self):
        self.writer.open(5, 5)
        with self.assertRaises(RuntimeError):
            self.writer.open(5, 5)

    def test_background_after_path_rejected(self):
        self.writer.open(5, 5)
        self.writer.draw_solution_path([(0, 0), (1, 1)])
        with self.assertRaises(RuntimeError):
            self.writer.draw_background("map.png")

    def test_path_after_edges_rejected(self):
        self.writer.open(5, 5)
        self.writer.draw_visited_edges(_edges(2))
        with self.assertRaises(RuntimeError):
            self.writer.draw_solution_path([(0, 0), (1, 1)])

    def test_optional_steps_can_be_skipped(self):
        self.writer.open(5, 5)
        self.writer.draw_visited_edges(_edges(2))
        self.writer.draw_visited_edges(_edges(1))
        self.writer.close()
        document = self.stream.getvalue()

        self.assertNotIn("<image", document)
        self.assertNotIn("<polyline", document)
        self.assertEqual(len(_line_segments(document)), 3)


class TestSolutionPath(unittest.TestCase):
    """Test solution polyline emission."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)
        self.writer.open(200, 200)

    def test_empty_path_draws_nothing(self):
        self.assertFalse(self.writer.draw_solution_path([]))
        self.writer.close()
        self.assertNotIn("<polyline", self.stream.getvalue())

    def test_single_point_draws_nothing(self):
        self.assertFalse(self.writer.draw_solution_path([Point2D(3.0, 4.0)]))
        self.writer.close()
        self.assertNotIn("<polyline", self.stream.getvalue())

    def test_points_keep_order_and_count(self):
        path = [(10, 20), (30, 5), (7, 150), (120, 120), (0, 0)]
        self.writer.draw_solution_path(path)
        points = _polyline_points(self.stream.getvalue())

        self.assertEqual(len(points), len(path))
        self.assertEqual(len(points) - 1, 4)
        self.assertEqual(points, [(float(x), float(y)) for x, y in path])

    def test_fractional_coordinates_preserved(self):
        self.writer.draw_solution_path([(0.25, 10.125), (150.5, 99.875)])
        points = _polyline_points(self.stream.getvalue())
        self.assertEqual(points, [(0.25, 10.125), (150.5, 99.875)])

    def test_non_finite_coordinate_rejected(self):
        with self.assertRaises(ValueError):
            self.writer.draw_solution_path([(0, 0), (float("nan"), 1)])

    def test_path_styled_differently_from_edges(self):
        style = SceneStyle()
        self.writer.draw_solution_path([(0, 0), (1, 1)])
        self.writer.draw_visited_edges(_edges(1))
        document = self.stream.getvalue()

        self.assertNotEqual(style.solution_stroke, style.visited_stroke)
        polyline = re.search(r"<polyline[^>]*>", document).group(0)
        line = re.search(r"<line\b[^>]*>", document).group(0)
        self.assertIn(style.solution_stroke, polyline)
        self.assertIn(style.visited_stroke, line)


class TestVisitedEdges(unittest.TestCase):
    """Test visited edge rendering and the cap."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)
        self.writer.open(50, 50)

    def test_edges_rendered_in_delivery_order(self):
        edges = [
            ((1, 2), (3, 4)),
            GraphEdge(Point2D(5.5, 6.0), Point2D(7.0, 8.25)),
            ((3, 4), (1, 2)),
            ((1, 2), (3, 4)),
        ]
        rendered = self.writer.draw_visited_edges(edges)
        segments = _line_segments(self.stream.getvalue())

        self.assertEqual(rendered, 4)
        self.assertEqual(
            segments,
            [
                ((1.0, 2.0), (3.0, 4.0)),
                ((5.5, 6.0), (7.0, 8.25)),
                ((3.0, 4.0), (1.0, 2.0)),
                ((1.0, 2.0), (3.0, 4.0)),
            ],
        )

    def test_default_cap_truncates_silently(self):
        rendered = self.writer.draw_visited_edges(_edges(10050))
        self.writer.close()
        segments = _line_segments(self.stream.getvalue())

        self.assertEqual(rendered, 10000)
        self.assertEqual(len(segments), 10000)
        self.assertEqual(segments[0], ((0.0, 0.0), (0.0, 1.0)))
        self.assertEqual(segments[-1], ((9999.0, 0.0), (9999.0, 1.0)))

    def test_custom_cap_boundary(self):
        self.assertEqual(self.writer.draw_visited_edges(_edges(3), max_edges=3), 3)
        self.assertEqual(self.writer.draw_visited_edges(_edges(4), max_edges=3), 3)
        self.assertEqual(self.writer.draw_visited_edges(_edges(5), max_edges=0), 0)
        self.assertEqual(len(_line_segments(self.stream.getvalue())), 6)

    def test_cap_resets_per_call(self):
        writer = VectorSceneWriter(io.StringIO(), max_edges=2)
        writer.open(10, 10)
        self.assertEqual(writer.draw_visited_edges(_edges(5)), 2)
        self.assertEqual(writer.draw_visited_edges(_edges(5)), 2)

    def test_edges_past_cap_are_still_consumed(self):
        delivered = []

        def stream_edges():
            for edge in _edges(6):
                delivered.append(edge)
                yield edge

        rendered = self.writer.draw_visited_edges(stream_edges(), max_edges=2)

        self.assertEqual(rendered, 2)
        self.assertEqual(len(delivered), 6)

    def test_negative_writer_cap_rejected(self):
        with self.assertRaises(ValueError):
            VectorSceneWriter(io.StringIO(), max_edges=-1)


class TestVisitedGraph(unittest.TestCase):
    """Test push-style traversal through a GraphVisitor."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)
        self.writer.open(50, 50)

    def test_traversal_callback_renders_edges(self):
        def traverse(visitor):
            root = Point2D(1.0, 1.0)
            visitor.on_vertex(root)
            for i in range(3):
                child = Point2D(2.0 + i, 3.0)
                visitor.on_vertex(child)
                visitor.on_edge(root, child)

        rendered = self.writer.draw_visited_graph(traverse)
        segments = _line_segments(self.stream.getvalue())

        self.assertEqual(rendered, 3)
        self.assertEqual(segments[2], ((1.0, 1.0), (4.0, 3.0)))
        self.assertEqual(self.writer.state, WriterState.EDGES_WRITTEN)

    def test_traversal_respects_cap(self):
        def traverse(visitor):
            for edge in _edges(10050):
                visitor.on_edge(edge.start, edge.end)

        self.assertEqual(self.writer.draw_visited_graph(traverse), 10000)

    def test_planner_visit_graph_is_called_with_collector(self):
        planner = Mock()

        rendered = self.writer.draw_visited_graph(planner.visit_graph)

        planner.visit_graph.assert_called_once()
        visitor = planner.visit_graph.call_args[0][0]
        self.assertIsInstance(visitor, EdgeCollector)
        self.assertEqual(rendered, 0)

    def test_collector_counts(self):
        collector = self.writer.edge_collector(max_edges=1)
        collector.on_vertex(Point2D(0.0, 0.0))
        collector.on_edge((0, 0), (1, 1))
        collector.on_edge((1, 1), (2, 2))

        self.assertEqual(collector.vertices, 1)
        self.assertEqual(collector.rendered, 1)
        self.assertEqual(collector.dropped, 1)


class TestDocumentIsWellFormed(unittest.TestCase):
    """Test that unusual but valid input still gives parseable XML."""

    def setUp(self):
        self.stream = io.StringIO()
        self.writer = VectorSceneWriter(self.stream)
        self.writer.open(10, 10)

    def test_background_path_with_markup_characters(self):
        image_path = 'maps/a&b "x" <1>.png'
        self.writer.draw_background(image_path)
        self.writer.draw_solution_path([(0, 0), (1, 1)])
        self.writer.close()

        root = ET.fromstring(self.stream.getvalue().encode("utf-8"))
        image = root.find("{http://www.w3.org/2000/svg}image")

        self.assertIsNotNone(image)
        self.assertEqual(image.get("href"), image_path)

    def test_nan_point_rejected_before_path_is_written(self):
        with self.assertRaises(ValueError):
            self.writer.draw_solution_path([Point2D(0.0, 0.0), Point2D(float("nan"), 1.0)])
        self.assertNotIn("nan", self.stream.getvalue())

    def test_infinite_edge_rejected(self):
        with self.assertRaises(ValueError):
            self.writer.draw_visited_edges([GraphEdge(Point2D(float("inf"), 0.0), Point2D(1.0, 1.0))])
        self.assertNotIn("inf", self.stream.getvalue())

    def test_infinite_edge_from_visitor_rejected(self):
        collector = self.writer.edge_collector()
        with self.assertRaises(ValueError):
            collector.on_edge((0.0, 0.0), (float("-inf"), 1.0))
        self.assertEqual(collector.rendered, 0)


class TestStreamFailures(unittest.TestCase):
    """Test that stream errors reach the caller."""

    def test_write_error_propagates(self):
        stream = Mock()
        stream.write.side_effect = OSError("disk full")
        writer = VectorSceneWriter(stream)

        with self.assertRaises(OSError):
            writer.open(10, 10)


class TestSceneModels:
    """Tests for Point2D, GraphEdge and SceneStyle helpers."""

    def test_point_coerce_from_tuple(self):
        assert Point2D.coerce((1, 2.5)) == Point2D(1.0, 2.5)

    def test_point_coerce_rejects_short_sequence(self):
        with pytest.raises(ValueError):
            Point2D.coerce((1,))

    def test_edge_coerce_from_nested_lists(self):
        edge = GraphEdge.coerce([[0, 1], [2, 3]])
        assert edge == GraphEdge(Point2D(0.0, 1.0), Point2D(2.0, 3.0))

    def test_as_coordinate_rejects_infinity(self):
        with pytest.raises(ValueError):
            as_coordinate(float("inf"))

    def test_style_dict_round_trip(self):
        style = SceneStyle(solution_stroke="red", visited_stroke_width=0.5)
        assert SceneStyle.from_dict(style.to_dict()) == style

    def test_point_rejects_non_finite_values(self):
        with pytest.raises(ValueError):
            Point2D(float("nan"), 1.0)
        with pytest.raises(ValueError):
            Point2D(0.0, float("inf"))

    def test_point_stores_floats(self):
        point = Point2D(3, 4)
        assert isinstance(point.x, float) and point.y == 4.0
