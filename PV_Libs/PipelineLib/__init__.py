"""
PipelineLib - Planning scene pipeline

This module wires the obstacle filter, an external planner and the scene
writer into a single image-to-overlay run.
"""

from PV_Libs.PipelineLib.planning_scene import (
    Planner,
    PlanningSceneConfig,
    PlanningSceneResult,
    load_scene_config,
    run_planning_scene,
    save_scene_config,
    write_planning_scene,
)

__all__ = [
    "Planner",
    "PlanningSceneConfig",
    "PlanningSceneResult",
    "load_scene_config",
    "run_planning_scene",
    "save_scene_config",
    "write_planning_scene",
]
