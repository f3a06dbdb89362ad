"""
Map Path Transform - Constants and Configuration

This module contains all constant values used throughout the engine:
- Default transform options (rotation, scaling, handle geometry)
- Projection constants
- Gesture guards
- Handle and guide styling for the Qt overlay
"""

# ======================================================================
# DEFAULT TRANSFORM OPTIONS
# ======================================================================

DEFAULT_ROTATION = True          # Show rotation handles
DEFAULT_SCALING = True           # Show corner scale handles
DEFAULT_UNIFORM_SCALING = True   # Keep aspect ratio while scaling
DEFAULT_EDGES_COUNT = 4          # Corner handles on the bounding rectangle
MAX_EDGES_COUNT = 4
DEFAULT_HANDLE_LENGTH = 40       # Rotation handle offset from the edge midpoint (px)
DEFAULT_MAX_ZOOM = 22            # Natural zoom used when committing geometry

# ======================================================================
# HANDLE GEOMETRY
# ======================================================================

HANDLE_RADIUS = 12               # Visual radius of a handle (px)
HANDLE_HIT_TOLERANCE = 4         # Extra pixels accepted by hit testing

# Rectangle half-size around point-like shapes (px at the natural zoom)
POINT_BOUNDS_RADIUS = 10

# ======================================================================
# GESTURE GUARDS
# ======================================================================

# Smallest scale ratio magnitude a drag may produce; anything smaller would
# collapse the shape onto a line that no later drag can recover from
MIN_SCALE_RATIO = 1e-3

# ======================================================================
# PROJECTION
# ======================================================================

TILE_SIZE = 256
EARTH_RADIUS = 6378137
MAX_LATITUDE = 85.0511287798

# ======================================================================
# OVERLAY STYLING (RGBA)
# ======================================================================

HANDLE_FILL_COLOR = (255, 255, 255, 255)
HANDLE_STROKE_COLOR = (32, 32, 32, 180)
HANDLE_STROKE_WIDTH = 2
BOUNDS_COLOR = (32, 32, 32, 255)
BOUNDS_DASH_PATTERN = [3, 3]
GUIDE_COLOR = (32, 32, 32, 255)
SHAPE_STROKE_COLOR = (51, 136, 255, 255)
SHAPE_FILL_COLOR = (51, 136, 255, 50)
SHAPE_STROKE_WIDTH = 3

# Cursor names per corner index (clockwise from top-left), mapped to Qt
# cursor shapes by the overlay
CORNER_CURSORS = ['nwse-resize', 'nesw-resize', 'nwse-resize', 'nesw-resize']
ROTATE_CURSOR = 'all-scroll'
