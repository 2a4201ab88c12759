"""Centralized constants for reprise.

Scheduling defaults, config bounds and priority weights live here so every
layer imports from a single source of truth.
"""

# ---------- Time ----------
SECONDS_PER_DAY = 86400

# ---------- Items ----------
TEMPLATE_SOURCE_TYPE = "template"

# ---------- Scheduling defaults ----------
DEFAULT_OK_MULTIPLIER = 1.5
DEFAULT_MAYBE_MULTIPLIER = 0.5
DEFAULT_NG_INTERVAL = 1
DEFAULT_MIN_INTERVAL = 1
DEFAULT_MAX_INTERVAL = 30
DEFAULT_INITIAL_INTERVAL = 1

# ---------- Config bounds (inclusive) ----------
OK_MULTIPLIER_BOUNDS = (1.0, 5.0)
MAYBE_MULTIPLIER_BOUNDS = (0.1, 1.0)
NG_INTERVAL_BOUNDS = (1, 30)
MIN_INTERVAL_BOUNDS = (1, 30)
MAX_INTERVAL_BOUNDS = (1, 365)
INITIAL_INTERVAL_BOUNDS = (1, 30)

CONFIG_STORAGE_KEY = "srs_config"

# ---------- Priority ranking ----------
OVERDUE_DAY_WEIGHT = 10
INTERVAL_PIVOT_DAYS = 30
INTERVAL_WEIGHT = 2
NG_BONUS = 20
MAYBE_BONUS = 10

# ---------- Selection ----------
DEFAULT_SESSION_COUNT = 5
# Session size per mode when none is requested; other modes use DEFAULT_SESSION_COUNT.
MODE_DEFAULT_COUNTS = {
    "normal": 5,
    "typing": 10,
    "shuffle": 10,
    "focus": 20,
    "review_only": 10,
    "favorite": 10,
    "weak": 10,
    "random": 15,
    "speed": 20,
}
UPCOMING_WINDOW_DAYS = 7
DEFAULT_SCHEDULE_DAYS = 30

# ---------- Flashcard words ----------
MIN_AUTO_WORD_LENGTH = 3
MAX_AUTO_WORDS = 5

# ---------- Auto-grading ----------
GRADE_OK_THRESHOLD = 0.95
GRADE_MAYBE_THRESHOLD = 0.75
