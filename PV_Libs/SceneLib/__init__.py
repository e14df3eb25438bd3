"""
SceneLib - Planning scene rendering

This module provides the point/edge models and the streaming SVG writer
that overlays a solution path and explored search graph on the source image.
"""

from PV_Libs.SceneLib.scene_models import (
    GraphEdge,
    GraphVisitor,
    Point2D,
    SceneStyle,
    as_coordinate,
)
from PV_Libs.SceneLib.scene_writer import EdgeCollector, VectorSceneWriter, WriterState

__all__ = [
    "GraphEdge",
    "GraphVisitor",
    "Point2D",
    "SceneStyle",
    "as_coordinate",
    "EdgeCollector",
    "VectorSceneWriter",
    "WriterState",
]
