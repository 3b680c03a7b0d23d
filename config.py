"""
GigMaster Narrative Engine v1.0 - Configuration
Tuning constants for event generation plus the JSON settings file that
holds the player's content preferences between runs.
"""

import json
import logging
import os
import sys
from datetime import datetime

logger = logging.getLogger("gigmaster.config")


# ─────────────────────────────────────────────────────
# PATHS
# ─────────────────────────────────────────────────────

ENGINE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.environ.get("GIGMASTER_DATA_DIR", os.path.join(ENGINE_DIR, "data"))
LOG_DIR = os.path.join(ENGINE_DIR, "logs")
SETTINGS_FILE = "settings.json"
PORT = int(os.environ.get("GIGMASTER_PORT", "8000"))


# ─────────────────────────────────────────────────────
# TUNING CONSTANTS
# ─────────────────────────────────────────────────────

MAX_FILTER_RETRIES = 5              # Nested regenerations when the filter blocks an event
SPECIFIC_EVENT_CHANCE = 0.3         # Contextual event forced this call
POST_GIG_SPECIFIC_CHANCE = 0.5      # Same, right after a gig
TEMPLATE_FALLBACK_CHANCE = 0.3      # Template engine when nothing else produced an event

WEEKLY_EVENT_BASE = 0.3             # Chance of an event on "advance week"
WEEKLY_EVENT_STRESS_SCALE = 0.4     # Added at stress_level 100
WEEKLY_EVENT_GRITTY_BONUS = 0.1     # Scenario flag bonus
WEEKLY_EVENT_MAX = 0.8

ARCHETYPE_MIN_SCORE = 3             # Below this the classifier stays silent
MAX_CHOICE_HISTORY = 200

FACTION_MIN_STANDING = -100
FACTION_MAX_STANDING = 100


# ─────────────────────────────────────────────────────
# CONTENT PREFERENCES
# ─────────────────────────────────────────────────────

CONTENT_PREFERENCE_KEYS = (
    "substance_abuse",
    "sexual_content",
    "criminal_activity",
    "psychological_themes",
    "violence",
    "explicit_language",
)

DEFAULT_ENHANCED_FEATURES = {
    "enabled": False,
    "maturity_level": "teen",
    "content_preferences": {key: False for key in CONTENT_PREFERENCE_KEYS},
}

DEFAULT_SETTINGS = {
    "scenario": "standard",
    "enhanced_features": DEFAULT_ENHANCED_FEATURES,
}


def _settings_path(data_dir: str = None) -> str:
    return os.path.join(data_dir or DATA_DIR, SETTINGS_FILE)


def load_settings(data_dir: str = None) -> dict:
    """Load settings.json, filling any missing key from DEFAULT_SETTINGS."""
    settings = json.loads(json.dumps(DEFAULT_SETTINGS))
    path = _settings_path(data_dir)
    if not os.path.exists(path):
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error reading settings {path}: {e}")
        return settings

    settings["scenario"] = stored.get("scenario", settings["scenario"])
    features = stored.get("enhanced_features", {})
    merged = settings["enhanced_features"]
    merged["enabled"] = bool(features.get("enabled", merged["enabled"]))
    merged["maturity_level"] = features.get("maturity_level", merged["maturity_level"])
    prefs = features.get("content_preferences", {})
    for key in CONTENT_PREFERENCE_KEYS:
        merged["content_preferences"][key] = bool(prefs.get(key, False))
    return settings


def save_settings(settings: dict, data_dir: str = None) -> str:
    """Write settings.json. Returns the path written."""
    path = _settings_path(data_dir)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
    logger.info(f"Settings saved to {path}")
    return path


# ─────────────────────────────────────────────────────
# LOGGING
# ─────────────────────────────────────────────────────

def setup_logging(level: int = logging.INFO, log_dir: str = None):
    """
    Console plus one log file per day under logs/.
    Safe to call multiple times; skips if handlers already exist.
    """
    root = logging.getLogger("gigmaster")
    if root.handlers:
        return
    root.setLevel(logging.DEBUG)

    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"gigmaster_{datetime.now().strftime('%Y-%m-%d')}.log")

    fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
                                      datefmt="%Y-%m-%d %H:%M:%S"))

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(message)s"))

    root.addHandler(fh)
    root.addHandler(ch)
    root.info(f"=== GigMaster session === Log: {os.path.basename(log_path)}")
