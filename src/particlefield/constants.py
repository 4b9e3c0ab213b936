# --- Configuration Constants ---
DEFAULT_FPS = 60
DEFAULT_RESOLUTION = (1080, 1350)  # 4:5 portrait
EXPORT_PIXEL_RATIO = 2
DEFAULT_DURATION = 20  # seconds

# Particle system settings
INITIAL_PARTICLES = 300
MIN_ACTIVE_PARTICLES = 150
SPAWNS_PER_SECOND = 0.5
LIFESPAN_MIN = 60  # seconds
LIFESPAN_MAX = 180
FIXED_LIFESPAN = 12  # seconds, used by the "steer" variant
PARTICLE_RADIUS = 3
PARTICLE_SPEED = 0.2  # max initial speed per axis, units per frame

# Connection lines
THRESHOLD_MIN = 100
THRESHOLD_MAX = 150
THRESHOLD_FREQUENCY = 0.5
LINE_ALPHA_MAX = 0.6
LINE_WIDTH_MAX = 1.5
LINE_WIDTH_MIN = 0.5

# Steering motion
STEER_FORCE = 0.01
STEER_FREQUENCY = 0.3
STEER_SCALE = 0.004  # spatial frequency of the steering field
EDGE_MARGIN = 60
EDGE_FORCE = 0.02
DAMPING = 0.99
MAX_SPEED = 0.6

# MIDI
NOTE_ON = 144
NOTE_OFF = 128
NOTE_MIN = 36  # C2
NOTE_MAX = 72  # C5
VELOCITY_MIN = 40
VELOCITY_MAX = 100

# Colors (RGBA)
TRAIL_COLOR = (10, 2, 2, 0.2)
PARTICLE_COLOR = (255, 255, 255)
LINE_COLOR = (255, 255, 255)
BACKGROUND_COLOR = (10, 2, 2)
