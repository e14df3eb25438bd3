"""
Planning scene pipeline for Plan Vision.

Runs the full image-to-overlay flow around an external path planner:

1. Decode the input image into a Raster
2. Classify obstacles (optionally writing a black/white filtered PNG)
3. Hand the ObstacleGrid, start and goal to the planner
4. Write an SVG with the source image, the solution path and the explored
   search graph

The planner is any object implementing the Planner protocol; this package
does not plan paths itself.

Classes:
    Planner: Interface expected from the external planner
    PlanningSceneConfig: Settings for one pipeline run
    PlanningSceneResult: Artifacts produced by a run

Functions:
    run_planning_scene: Execute the pipeline
    write_planning_scene: Write an SVG overlay file
    load_scene_config: Load a PlanningSceneConfig from JSON
    save_scene_config: Save a PlanningSceneConfig to JSON
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union
import json
import logging

from PV_Libs.constants import (
    DEFAULT_FILTERED_OUTPUT,
    DEFAULT_INPUT_PATH,
    DEFAULT_MAX_SOLVE_TIME,
    DEFAULT_OBSTACLE_COLORS,
    DEFAULT_SCENE_OUTPUT,
    DEFAULT_TOLERANCE,
    FIELD_GOAL,
    FIELD_OBSTACLE_COLORS,
    FIELD_START,
    MAX_VISITED_EDGES,
    WHITE_THRESHOLD,
)
from PV_Libs.ObstacleLib.obstacle_filter import ObstacleFilterConfig
from PV_Libs.ObstacleLib.raster_codec import decode_raster, encode_raster
from PV_Libs.ObstacleLib.raster_models import ObstacleGrid, RgbColor
from PV_Libs.SceneLib.scene_models import GraphVisitor, Point2D, SceneStyle
from PV_Libs.SceneLib.scene_writer import VectorSceneWriter

logger = logging.getLogger(__name__)


class Planner(Protocol):
    """External path planner driven by the pipeline."""

    def solve(
        self,
        grid: ObstacleGrid,
        start: Point2D,
        goal: Point2D,
        time_budget: float,
    ) -> Sequence[Any]:
        """Search for a path; return its points (empty if none was found)."""
        ...

    def visit_graph(self, visitor: GraphVisitor) -> None:
        """Call ``visitor.on_vertex`` / ``visitor.on_edge`` for the search graph."""
        ...


@dataclass
class PlanningSceneConfig:
    """Configuration for a planning scene run.

    Attributes:
        input_path: Source image
        filtered_output_path: Where the black/white obstacle image is written
        scene_output_path: Where the SVG overlay is written
        obstacle_colors: Reference RGB colors treated as obstacles
        tolerance: Per-channel tolerance for obstacle colors (default: 15)
        white_threshold: Near-white rule threshold (default: 250)
        write_filtered_image: Write the filtered PNG (default: True)
        start: Start point (x, y) in pixels
        goal: Goal point (x, y) in pixels
        max_solve_time: Planner time budget in seconds (default: 0.05)
        max_visited_edges: Cap on rendered search graph edges (default: 10000)
        draw_visited_edges: Render the explored search graph (default: True)
        max_workers: Threads for obstacle classification (default: 1)
    """
    input_path: str = DEFAULT_INPUT_PATH
    filtered_output_path: str = DEFAULT_FILTERED_OUTPUT
    scene_output_path: str = DEFAULT_SCENE_OUTPUT
    obstacle_colors: List[RgbColor] = field(default_factory=lambda: list(DEFAULT_OBSTACLE_COLORS))
    tolerance: int = DEFAULT_TOLERANCE
    white_threshold: int = WHITE_THRESHOLD
    write_filtered_image: bool = True
    start: Tuple[float, float] = (430.0, 1300.0)
    goal: Tuple[float, float] = (3150.0, 950.0)
    max_solve_time: float = DEFAULT_MAX_SOLVE_TIME
    max_visited_edges: int = MAX_VISITED_EDGES
    draw_visited_edges: bool = True
    max_workers: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data[FIELD_OBSTACLE_COLORS] = [list(color) for color in self.obstacle_colors]
        data[FIELD_START] = list(self.start)
        data[FIELD_GOAL] = list(self.goal)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanningSceneConfig":
        """Create from dictionary, ignoring unknown keys."""
        normalized = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if FIELD_OBSTACLE_COLORS in normalized:
            normalized[FIELD_OBSTACLE_COLORS] = [tuple(color) for color in normalized[FIELD_OBSTACLE_COLORS]]
        for key in (FIELD_START, FIELD_GOAL):
            if key in normalized:
                x, y = normalized[key]
                normalized[key] = (float(x), float(y))
        return cls(**normalized)

    def get_filter_config(self, recolor: bool = False) -> ObstacleFilterConfig:
        """Get ObstacleFilterConfig from this config."""
        return ObstacleFilterConfig(
            obstacle_colors=list(self.obstacle_colors),
            tolerance=self.tolerance,
            white_threshold=self.white_threshold,
            recolor=recolor,
            max_workers=self.max_workers,
        )


@dataclass
class PlanningSceneResult:
    grid: ObstacleGrid
    solution: List[Point2D]
    scene_path: Optional[Path] = None
    filtered_path: Optional[Path] = None
    rendered_edges: int = 0


def load_scene_config(config_path: Union[str, Path]) -> PlanningSceneConfig:
    """
    Load a PlanningSceneConfig from a JSON file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a JSON object
    """
    config_path = Path(config_path)
    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scene config must be a JSON object: {config_path}")
    return PlanningSceneConfig.from_dict(data)


def save_scene_config(config: PlanningSceneConfig, config_path: Union[str, Path]) -> Path:
    """Save a PlanningSceneConfig to a JSON file."""
    config_path = Path(config_path)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    return config_path


def write_planning_scene(
    output_path: Union[str, Path],
    width: int,
    height: int,
    solution: Sequence[Any],
    background_path: Optional[Union[str, Path]] = None,
    traverse: Optional[Callable[[GraphVisitor], None]] = None,
    edges: Optional[Iterable[Any]] = None,
    max_edges: int = MAX_VISITED_EDGES,
    style: Optional[SceneStyle] = None,
) -> int:
    """
    Write an SVG overlay for one planning result.

    Args:
        output_path: Destination SVG file
        width, height: Canvas size, equal to the source image size
        solution: Solution path points
        background_path: Image referenced as background (omitted if None)
        traverse: Push-style graph walk, e.g. ``planner.visit_graph``
        edges: Already collected visited edges, drawn after ``traverse``
        max_edges: Cap on rendered edges per source
        style: Stroke styling

    Returns:
        Number of visited edges written

    Raises:
        OSError: If the file cannot be written
    """
    output_path = Path(output_path)
    rendered = 0
    with open(output_path, "w", encoding="utf-8") as stream:
        writer = VectorSceneWriter(stream, style=style, max_edges=max_edges)
        writer.open(width, height)
        if background_path is not None:
            writer.draw_background(str(background_path))
        writer.draw_solution_path(solution)
        if traverse is not None:
            rendered += writer.draw_visited_graph(traverse)
        if edges is not None:
            rendered += writer.draw_visited_edges(edges)
        writer.close()
    return rendered


def run_planning_scene(config: PlanningSceneConfig, planner: Planner) -> PlanningSceneResult:
    """
    Run the image -> obstacle grid -> planner -> SVG pipeline.

    Args:
        config: Pipeline settings
        planner: External planner implementing the Planner protocol

    Returns:
        PlanningSceneResult with the grid, the solution and written file paths.
        ``scene_path`` is None when the planner found no solution.

    Raises:
        ValueError: If the input image cannot be decoded
        OSError: If an output file cannot be written
    """
    raster = decode_raster(config.input_path)
    logger.info(f"Loaded {config.input_path} ({raster.width}x{raster.height})")

    filter_config = config.get_filter_config(recolor=config.write_filtered_image)
    grid = filter_config.apply(raster)

    result = PlanningSceneResult(grid=grid, solution=[])

    if config.write_filtered_image:
        logger.info(f"Writing filtered png to {config.filtered_output_path}")
        result.filtered_path = encode_raster(raster, config.filtered_output_path)

    start = Point2D.coerce(config.start)
    goal = Point2D.coerce(config.goal)
    solution = planner.solve(grid, start, goal, config.max_solve_time)
    result.solution = [Point2D.coerce(point) for point in solution]

    if not result.solution:
        logger.info("No solution was found")
        return result

    logger.info(f"Writing the solution to {config.scene_output_path}")
    result.rendered_edges = write_planning_scene(
        config.scene_output_path,
        raster.width,
        raster.height,
        result.solution,
        background_path=config.input_path,
        traverse=planner.visit_graph if config.draw_visited_edges else None,
        max_edges=config.max_visited_edges,
    )
    result.scene_path = Path(config.scene_output_path)
    return result
