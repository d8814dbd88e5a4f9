"""
pi-planning shared configuration, constants, and module-level state.
Standalone module — no imports from other project files.
"""

import os

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")
ENV_PREFIX = "PI_PLANNING_"


def load_env():
    """Read .env, then let PI_PLANNING_* process environment variables override it."""
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip()
    for key, val in os.environ.items():
        if key.startswith(ENV_PREFIX):
            env[key] = val.strip()
    return env


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"
CONTRACT_SCHEMA_VERSION = "1.0"

VALID_TEMPLATE_TYPES = {
    "theme",
    "milestone",
    "userStory",
    "epic",
    "initiative",
    "task",
    "spike",
    "test",
}
VALID_FORMATS = {"json", "table", "csv"}

EXPORT_FILENAME_PREFIX = "pi-planning-export-"

# Out-of-band frame metadata keys
META_ISSUE_KEY = "issueKey"
META_IS_COPY = "isCopy"

# Card geometry (shared by layout.py and extractor.py)
CARD_WIDTH = 400
CARD_PADDING = 20
TITLE_Y = 20
TITLE_FONT_SIZE = 24
FIRST_FIELD_Y = 60
LABEL_VALUE_GAP = 20
FIELD_GAP = 40
LINE_HEIGHT = 18
BOTTOM_BAND = 60
LARGE_NUMBER_FONT_SIZE = 36
ICON_SIZE = 32
ROW_TOLERANCE = 10

# Import grid
GRID_GAP = 40

# Progress notifications
PROGRESS_MIN_ROWS = 10
PROGRESS_STEP_PERCENT = 10

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env)
# ---------------------------------------------------------------------------

env = load_env()

TRACKER_BASE_URL = env.get("PI_PLANNING_TRACKER_URL", "https://your-domain.atlassian.net")
BOARD_PATH = env.get("PI_PLANNING_BOARD", ".pi_board.json")
LOG_ENABLED = _env_bool("PI_PLANNING_LOG", False)
RECONCILE_INTERVAL_SECONDS = max(0.1, _env_float("PI_PLANNING_RECONCILE_INTERVAL", 2.0))
RECONCILE_DEBOUNCE_SECONDS = max(0.0, _env_float("PI_PLANNING_RECONCILE_DEBOUNCE", 0.3))
GRID_COLUMNS = max(1, _env_int("PI_PLANNING_GRID_COLUMNS", 5))
MAX_CSV_BYTES = _env_int("PI_PLANNING_MAX_CSV_BYTES", 5_000_000)

# ---------------------------------------------------------------------------
# Runtime flags (set by cli.main)
# ---------------------------------------------------------------------------

RUNTIME_QUIET = False
RUNTIME_VERBOSE = False
