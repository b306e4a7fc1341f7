import math

TICKS_PER_SEC = 60

# Frame timing. Movement and animation are expressed per reference frame
# (60fps) and scaled by the real frame delta.
REFERENCE_FRAME_MS = 16.67
MAX_FRAME_MS = 100.0  # clamp for stalled or backgrounded frames

# Click-to-move
MOVE_SPEED = 0.15  # world units per reference frame
ARRIVAL_THRESHOLD = 0.1  # tolerant of click/touch imprecision
DIRECTION_EPSILON = 1e-6
ROTATION_RATE = 0.005  # fraction of the remaining turn per ms
STEP_LENGTH = 4.0  # distance covered by one walk cycle

# Agent collision radius added to every obstacle shape. The player of the
# original world used 1.0 against 1.2 trunks; 0 keeps shapes exact.
AGENT_RADIUS = 0.0

# Path planning
PATH_MIN_SAMPLES = 8
PATH_SAMPLE_SPACING = 0.5
SEGMENT_EPSILON = 1e-6
DETOUR_CLEARANCE = 2.0
MAX_STRETCH_FACTOR = 2.0
SWEEP_DISTANCES = (3.0, 4.0, 5.0)
SWEEP_ANGLE_COUNT = 12  # 0..330 degrees

# World layout
WORLD_SIZE = 200.0
WALL_THICKNESS = 2.0
TREE_COUNT = 20
TREE_AREA = 80.0
TREE_MIN_SPACING = 8.0
TREE_MAX_ATTEMPTS = 50
TREE_TRUNK_RADIUS = 2.5

# Procedural assets
CYLINDER_SEGMENTS = 16
CYLINDER_DETAIL_SEGMENTS = 32
CYLINDER_DETAIL_KEYWORDS = ('logo_base', 'hilt', 'handle', 'barrel', 'wheel')
SPHERE_WIDTH_SEGMENTS = 16
SPHERE_HEIGHT_SEGMENTS = 8
DEFAULT_PART_COLOR = (255, 255, 255)
MESH_CACHE_SIZE = 256  # least recently used meshes are dropped past this
ITEM_SCALE = 0.2
BODY_SCALE = 0.1

# Rig animation (radians)
ARM_SWING = 0.3
LEG_SWING = 0.4
QUADRUPED_SWING = 0.4
BODY_BOB = 0.02

# Item library
ITEM_LIBRARY_PATH = 'items.json'

# Enable ANSI colors in logs.
LOG_COLOR = True

# Log per-frame timings.
LOG_MAIN_LOOP = False

# Minimum level printed: DEBUG, INFO, WARN, ERROR.
LOG_LEVEL = 'INFO'

FULL_TURN = 2 * math.pi
