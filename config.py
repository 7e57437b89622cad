"""
General config file for the Orrery
Contains constants and global variables which can be altered.
Ephemeris service URL and log level can also come from the environment.
"""
import os

# --- Constants ---
SCREEN_WIDTH = 1400
SCREEN_HEIGHT = 800
FPS = 60

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GREY = (30, 30, 30)
MID_GREY = (90, 90, 90)
LIGHT_GREY = (135, 135, 135)
AXIS_LABEL_COLOR = (50, 50, 50)
ORBIT_GREY = (84, 84, 84)
HIGHLIGHT_ORBIT = (255, 84, 84)
BLUE = (100, 149, 237)
RED = (255, 100, 100)
GREEN = (120, 138, 48) # #788a30
YELLOW = (255, 255, 0)
ORANGE = (255, 165, 0)
CYAN = (0, 255, 255)
DUSTY_RED = (180, 80, 80)
DARK_GREY = (50, 50, 50)

# Body colors (no textures, flat shading only)
BODY_COLORS = {
    "Sun": YELLOW,
    "Mercury": (160, 160, 160),
    "Venus": (230, 194, 41),
    "Earth": BLUE,
    "Mars": (193, 68, 14),
    "Jupiter": (216, 202, 157),
    "Saturn": (244, 213, 158),
    "Uranus": (209, 231, 231),
    "Neptune": (91, 93, 223),
    "Io": (230, 220, 90),
    "Default": WHITE
}

# --- Scaling factors ---
# Catalog distances are multiplied by DISTANCE_SCALE once, at load time.
SCALE_FACTOR = 0.1
DISTANCE_SCALE = 50 * SCALE_FACTOR
SUN_RADIUS = 69.88 * SCALE_FACTOR
MIN_BODY_RADIUS_PIXELS = 2
MAX_BODY_RADIUS_PIXELS = 12
BODY_RADIUS_PIXEL_SCALE = 2.5
DEEP_SKY_RADIUS_PIXELS = 2

# Number of points used to draw each orbit ring
ORBIT_SEGMENTS = 64

# Coordinate clamping limits for Pygame
COORD_MIN = -32760
COORD_MAX = 32760

# --- Ephemeris service ---
EPHEMERIS_BASE_URL = os.environ.get("ORRERY_EPHEMERIS_URL", "http://localhost:3000")
EPHEMERIS_PATH = "/planet-data"
OBJECT_DATA_PATH = "/object-data"
# Bundled deep-sky table used when the object-data endpoint is unavailable
DEEP_SKY_CSV = os.environ.get("ORRERY_DEEP_SKY_CSV", "deep_sky.csv")
REQUEST_TIMEOUT = 15
USER_AGENT = "Ephemeris-Orrery-Python-Client/1.0"

# Wall-clock hours between automatic refreshes
REFRESH_INTERVAL_HOURS = 24

# --- Body catalog ---
# distance is in catalog units (scaled by DISTANCE_SCALE), radius is visual only.
# command is the identifier sent to the ephemeris service.
PLANETS = [
    {"name": "Mercury", "radius": 0.383, "distance": 5, "command": "199"},
    {"name": "Venus", "radius": 0.949, "distance": 7, "command": "299"},
    {"name": "Earth", "radius": 1, "distance": 10, "command": "399"},
    {"name": "Mars", "radius": 0.532, "distance": 15, "command": "499"},
    {"name": "Jupiter", "radius": 11.21, "distance": 52, "command": "599"},
    {"name": "Saturn", "radius": 9.45, "distance": 95, "command": "699"},
    {"name": "Uranus", "radius": 4, "distance": 192, "command": "799"},
    {"name": "Neptune", "radius": 3.88, "distance": 301, "command": "899"},
    {"name": "Io", "radius": 50.286, "distance": 421, "command": "501"},
]

# Camera presets cycled with the 'v' key: (rotation_x, rotation_y) in degrees
CAMERA_VIEWS = [
    ("Default", 0, 0),
    ("Right", 0, 90),
    ("Top", 89, 0),
    ("Left", 0, -90),
    ("Bottom", -89, 0),
]

# --- Logging ---
LOG_LEVEL = os.environ.get("ORRERY_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
