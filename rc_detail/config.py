"""
Default constants and numeric tolerances for rc_detail.

Values mirror the look of the reinforced-concrete detail viewer:
metres as the length unit, thin dimension lines, small arrowheads.
Per-project overrides live in project_config (.rcdetail.json); builders
receive those as config objects and never patch this module.
"""

# ---------------------------------------------------------------------------
# Tolerances
# ---------------------------------------------------------------------------

EPS_LENGTH = 1e-9                # shorter vectors are treated as zero-length
PARALLEL_DOT = 1.0 - 1e-12       # |dot| above this counts as (anti)parallel
PERPENDICULAR_TOLERANCE = 1e-3   # max |dot| between torsion plane vectors
NORMAL_TOLERANCE = 1e-5          # unit-normal check in validator
SPLIT_SIDE_EPS = 1e-4            # relative to max(width, depth)
DOT_COUNT_GUARD = 1e-9           # ceil() guard against float noise
MIN_ARC_STEP = 1e-8              # shortest step between torsion arc samples

# ---------------------------------------------------------------------------
# Wave panel (corrugated concrete interface)
# ---------------------------------------------------------------------------

WAVE_DIV_U = 50
WAVE_DIV_V = 10
WAVE_AMPLITUDE = 0.04
WAVE_FREQUENCY = 5.0

# ---------------------------------------------------------------------------
# Dimension annotations
# ---------------------------------------------------------------------------

DIM_LINE_THICKNESS = 0.015
DIM_ARROW_SIZE = 0.15
DIM_ARROW_DIAMETER = 0.08
DIM_CONNECTOR_THICKNESS = 0.01
DIM_DECIMALS = 2
DIM_UNIT_SUFFIX = "m"
DIM_RADIAL_SEGMENTS = 16
DIM_BOUNDS_OFFSET = 0.1

# ---------------------------------------------------------------------------
# Bending moment (dotted line + arrow)
# ---------------------------------------------------------------------------

MOMENT_DOT_SPACING = 0.1
MOMENT_DOT_RADIUS = 0.003
MOMENT_ARROW_SIZE = 0.03
MOMENT_ARROW_DIAMETER = 0.02
MOMENT_LABEL_OFFSET_X = 10
MOMENT_LABEL_OFFSET_Y = -15
MOMENT_RADIAL_SEGMENTS = 12

# ---------------------------------------------------------------------------
# Torsion moment (arc + tangential arrow)
# ---------------------------------------------------------------------------

TORSION_ARC_RADIUS = 0.06
TORSION_ARC_THICKNESS = 0.003
TORSION_ARC_ANGLE_DEG = 270.0
TORSION_START_ANGLE_DEG = -45.0
TORSION_OVERSHOOT_DEG = 45.0
TORSION_ARROW_SIZE = 0.05
TORSION_ARROW_DIAMETER = 0.05
TORSION_ARC_SEGMENTS = 60
TORSION_TESSELLATION = 16
TORSION_LABEL_OFFSET_X = 15
TORSION_LABEL_OFFSET_Y = -15

# ---------------------------------------------------------------------------
# Unit axis triad
# ---------------------------------------------------------------------------

AXIS_RADIUS = 0.002
AXIS_ARROW_SIZE = 0.02
AXIS_LENGTH = 0.2
AXIS_LABEL_OFFSET_X = 20
AXIS_LABEL_OFFSET_Y = 0
AXIS_RADIAL_SEGMENTS = 12

# ---------------------------------------------------------------------------
# Fastener posts
# ---------------------------------------------------------------------------

POST_HEIGHT = 1.0
POST_DIAMETER = 0.2
POST_RADIAL_SEGMENTS = 16
