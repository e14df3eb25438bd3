"""
Planning scene demonstration.

Builds a small synthetic map, runs the planning scene pipeline with a toy
planner and writes the filtered PNG and the SVG overlay next to this script.

The toy planner does no real search: it walks a fixed detour around the wall
and reports a fan of "explored" edges so the overlay has something to show.
Plug a real planner in by implementing ``solve`` and ``visit_graph``.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from PIL import Image, ImageDraw

from PV_Libs.PipelineLib import PlanningSceneConfig, run_planning_scene
from PV_Libs.SceneLib import Point2D


class DetourPlanner:
    """Returns a hand-made path over the top of the wall."""

    def __init__(self, width, height):
        self.width = width
        self.height = height

    def solve(self, grid, start, goal, time_budget):
        print(f"Planning on a {grid.width}x{grid.height} grid "
              f"({grid.obstacle_count} obstacle cells, budget {time_budget}s)")
        waypoint = Point2D(self.width / 2, self.height * 0.1)
        path = [start, waypoint, goal]
        for point in path:
            if grid.is_obstacle(int(point.x), int(point.y)):
                return []
        return path

    def visit_graph(self, visitor):
        root = Point2D(self.width * 0.1, self.height * 0.8)
        visitor.on_vertex(root)
        for step in range(40):
            child = Point2D(self.width * 0.1 + step * 3, self.height * 0.8 - (step % 7) * 6)
            visitor.on_vertex(child)
            visitor.on_edge(root, child)


def build_map(path, width=320, height=200):
    """Draw a map with a white wall and two brown obstacle blocks."""
    image = Image.new("RGB", (width, height), (90, 140, 90))
    draw = ImageDraw.Draw(image)
    draw.rectangle([width // 2 - 5, height // 4, width // 2 + 5, height], fill=(255, 255, 255))
    draw.rectangle([40, 30, 80, 60], fill=(126, 106, 61))
    draw.rectangle([230, 120, 270, 150], fill=(61, 53, 6))
    image.save(path)
    return width, height


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(__file__).parent
    input_path = out_dir / "demo_map.png"
    width, height = build_map(input_path)

    config = PlanningSceneConfig(
        input_path=str(input_path),
        filtered_output_path=str(out_dir / "demo_map_filtered.png"),
        scene_output_path=str(out_dir / "demo_scene.svg"),
        start=(width * 0.1, height * 0.8),
        goal=(width * 0.9, height * 0.8),
        max_workers=4,
    )
    result = run_planning_scene(config, DetourPlanner(width, height))

    print("-" * 60)
    print(f"Obstacle cells:  {result.grid.obstacle_count}/{len(result.grid)}")
    print(f"Filtered image:  {result.filtered_path}")
    print(f"Scene overlay:   {result.scene_path}")
    print(f"Visited edges:   {result.rendered_edges}")


if __name__ == "__main__":
    main()
