"""
GigMaster Narrative Engine v1.0 - Content Preference Filter
Decides whether an enhanced event may be shown under the player's
content preferences. Missing preferences count as disabled.
"""

import logging

from models import Event

logger = logging.getLogger("gigmaster.filter")

CATEGORY_PREFERENCES = {
    "substance_abuse": "substance_abuse",
    "sexual_content": "sexual_content",
    "criminal_activity": "criminal_activity",
    "corruption": "criminal_activity",
    "violence": "violence",
    "psychological_horror": "psychological_themes",
    "psychological_themes": "psychological_themes",
}

# Less graphic; allowed through the maturity gate in teen mode.
PSYCHOLOGICAL_CATEGORIES = ("psychological_horror", "psychological_themes")


def _warning_preference(warning: str):
    if warning == "drug_use":
        return "substance_abuse"
    if warning == "sexual_content":
        return "sexual_content"
    if warning == "legal_trouble" or "criminal" in warning:
        return "criminal_activity"
    if warning == "violence":
        return "violence"
    return None


def should_show_event(event: Event, enhanced_features: dict) -> bool:
    features = enhanced_features or {}
    if not features.get("enabled"):
        return True

    prefs = features.get("content_preferences") or {}
    maturity = event.maturity_level
    category = event.category
    warnings = event.content_warnings or []

    if (maturity == "mature" and features.get("maturity_level", "teen") == "teen"
            and category not in PSYCHOLOGICAL_CATEGORIES):
        logger.info(f"Blocked by maturity: {event.title} ({category})")
        return False

    pref_key = CATEGORY_PREFERENCES.get(category)
    if pref_key and not prefs.get(pref_key):
        logger.info(f"Blocked by category: {event.title} ({category} -> {pref_key})")
        return False

    for warning in warnings:
        pref_key = _warning_preference(warning)
        if pref_key and not prefs.get(pref_key):
            logger.info(f"Blocked by content warning: {event.title} ({warning})")
            return False

    logger.debug(f"Approved: {event.title}")
    return True


def filter_events_by_preferences(events: list, enhanced_features: dict) -> list:
    return [e for e in events if should_show_event(e, enhanced_features)]


def needs_content_warning(event: Event, enhanced_features: dict) -> bool:
    """True when the UI should show a warning before displaying the event."""
    features = enhanced_features or {}
    if not features.get("enabled"):
        return False
    if event.maturity_level == "mature" and features.get("maturity_level", "teen") == "teen":
        return True
    return len(event.content_warnings or []) > 0
