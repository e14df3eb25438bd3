"""
PV_Libs - Plan Vision Library Modules

This package turns a raster map into an obstacle grid for a path planner
and renders planning results back over the source image, organized into
specialized sub-packages:

- ObstacleLib: Raster models, color matching and obstacle classification
- SceneLib: Streaming SVG overlay of solution paths and explored graphs
- PipelineLib: End-to-end planning scene driver around an external planner
"""

__version__ = "0.1.0"
