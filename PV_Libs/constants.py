"""
Constants and configuration values for Plan Vision.

This module centralizes the default values used by the obstacle filter,
the scene writer and the planning scene pipeline.
"""

# Obstacle classification
DEFAULT_TOLERANCE = 15
WHITE_THRESHOLD = 250
CHANNEL_MIN = 0
CHANNEL_MAX = 255

# Reference obstacle colors (R, G, B) used when none are configured
DEFAULT_OBSTACLE_COLORS = (
    (126, 106, 61),
    (61, 53, 6),
)

# Recolored debug output
OBSTACLE_RGB = (0, 0, 0)
FREE_RGB = (255, 255, 255)
BYTES_PER_PIXEL = 3

# Scene rendering
MAX_VISITED_EDGES = 10000
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
SOLUTION_STROKE = "rgb(220,20,60)"
SOLUTION_STROKE_WIDTH = 4
VISITED_STROKE = "rgba(30,144,255,0.6)"
VISITED_STROKE_WIDTH = 1

# File naming
DEFAULT_INPUT_PATH = "png_planning_input.png"
DEFAULT_FILTERED_OUTPUT = "png_planning_filtered.png"
DEFAULT_SCENE_OUTPUT = "png_2d_demo.svg"
DEFAULT_OUTPUT_FORMAT = "PNG"

# Planning
DEFAULT_MAX_SOLVE_TIME = 0.05  # seconds

# Config field names
FIELD_OBSTACLE_COLORS = "obstacle_colors"
FIELD_START = "start"
FIELD_GOAL = "goal"
