#!/usr/bin/env python3
"""
plan_vision.py - command line for the Plan Vision tools

Subcommands:
  filter  Classify obstacles in an image and write the black/white filtered PNG
  scene   Overlay a solution path (and optional explored edges) on an image as SVG

Usage:
  python3 plan_vision.py filter map.png --output map_filtered.png --color 126,106,61
  python3 plan_vision.py scene map.png path.json --edges edges.json --output scene.svg

path.json holds a list of [x, y] points; edges.json a list of [[x1, y1], [x2, y2]].
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from PV_Libs.constants import (
    DEFAULT_FILTERED_OUTPUT,
    DEFAULT_OBSTACLE_COLORS,
    DEFAULT_SCENE_OUTPUT,
    DEFAULT_TOLERANCE,
    MAX_VISITED_EDGES,
    WHITE_THRESHOLD,
)
from PV_Libs.ObstacleLib import ObstacleFilterConfig, decode_raster, encode_raster
from PV_Libs.PipelineLib import write_planning_scene

logger = logging.getLogger("plan_vision")


def parse_color(text: str):
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"color must be R,G,B, got {text!r}")
    try:
        color = tuple(int(part) for part in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"color channels must be integers, got {text!r}")
    if any(not (0 <= channel <= 255) for channel in color):
        raise argparse.ArgumentTypeError(f"color channels must be 0-255, got {text!r}")
    return color


def _load_json_list(path: Path) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list")
    return data


def run_filter(args: argparse.Namespace) -> int:
    colors = args.color or list(DEFAULT_OBSTACLE_COLORS)
    config = ObstacleFilterConfig(
        obstacle_colors=colors,
        tolerance=args.tolerance,
        white_threshold=args.white_threshold,
        recolor=True,
        max_workers=args.workers,
    )
    raster = decode_raster(args.input)
    grid = config.apply(raster)
    encode_raster(raster, args.output)

    total = len(grid)
    share = (100.0 * grid.obstacle_count / total) if total else 0.0
    logger.info(
        f"{args.input}: {grid.obstacle_count}/{total} obstacle pixels ({share:.1f}%), "
        f"filtered image written to {args.output}"
    )
    return 0


def run_scene(args: argparse.Namespace) -> int:
    raster = decode_raster(args.input)
    solution = _load_json_list(Path(args.path))
    edges = _load_json_list(Path(args.edges)) if args.edges else None

    rendered = write_planning_scene(
        args.output,
        raster.width,
        raster.height,
        solution,
        background_path=args.input,
        edges=edges,
        max_edges=args.max_edges,
    )
    logger.info(f"Wrote {args.output}: {len(solution)} path points, {rendered} visited edges")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Obstacle filtering and planning scene overlays")
    ap.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    fp = sub.add_parser("filter", help="classify obstacles and write a filtered PNG")
    fp.add_argument("input", help="input image")
    fp.add_argument("--output", default=DEFAULT_FILTERED_OUTPUT, help="filtered PNG path")
    fp.add_argument("--tolerance", type=int, default=DEFAULT_TOLERANCE)
    fp.add_argument("--white-threshold", type=int, default=WHITE_THRESHOLD)
    fp.add_argument(
        "--color",
        type=parse_color,
        action="append",
        help="obstacle color R,G,B (repeatable; defaults to the built-in list)",
    )
    fp.add_argument("--workers", type=int, default=1, help="threads scanning row bands")
    fp.set_defaults(func=run_filter)

    sp = sub.add_parser("scene", help="write an SVG overlay of a path on an image")
    sp.add_argument("input", help="background image")
    sp.add_argument("path", help="JSON list of [x, y] solution points")
    sp.add_argument("--edges", help="JSON list of [[x1, y1], [x2, y2]] visited edges")
    sp.add_argument("--output", default=DEFAULT_SCENE_OUTPUT, help="SVG path")
    sp.add_argument("--max-edges", type=int, default=MAX_VISITED_EDGES)
    sp.set_defaults(func=run_scene)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
