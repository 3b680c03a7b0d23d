"""
GigMaster Narrative Engine v1.0 - Event Enhancement
Normalizes a generated event: top-level category, maturity level and
content warnings are always populated, and an `enhanced` block is
attached to the event and to each choice. Author-supplied values win
over the classifier's guesses.
"""

import logging
from dataclasses import replace

from models import Choice, ChoiceEnhancement, EnhancedMeta, Event

logger = logging.getLogger("gigmaster.enhancement")


# ─────────────────────────────────────────────────────
# CLASSIFIER
# ─────────────────────────────────────────────────────

MATURE_KEYWORDS = (
    "drug", "alcohol", "high", "drunk",
    "sex", "affair", "strip", "naked",
    "violence", "fight", "murder", "kill",
    "criminal", "arrest", "jail", "theft",
    "overdose", "addiction", "rehab",
)

# Checked in order against the lowercased title; first hit wins.
CATEGORY_RULES = (
    ("substance_abuse", ("drug", "alcohol", "high")),
    ("sexual_content", ("scandal", "sex", "affair")),
    ("criminal_activity", ("criminal", "arrest", "theft")),
    ("band_management", ("drama", "fight", "conflict")),
    ("fame_scandal", ("photo", "viral", "scandal")),
)

WARNING_RULES = (
    ("drug_use", ("drug",)),
    ("alcohol_use", ("alcohol",)),
    ("sexual_content", ("sex", "affair", "naked")),
    ("violence", ("violence", "fight", "murder")),
    ("overdose_references", ("overdose",)),
    ("legal_trouble", ("arrest", "jail", "criminal")),
)


class KeywordClassifier:
    """Substring heuristics. Best effort; swap in anything with the same three methods."""

    def detect_maturity_level(self, event: Event) -> str:
        choice_text = " ".join(c.text for c in event.choices)
        text = f"{event.title} {event.description} {choice_text}".lower()
        return "mature" if any(k in text for k in MATURE_KEYWORDS) else "teen"

    def categorize_event(self, event: Event) -> str:
        title = (event.title or "").lower()
        for category, words in CATEGORY_RULES:
            if any(w in title for w in words):
                return category
        return "general"

    def detect_content_warnings(self, event: Event) -> list:
        text = f"{event.title} {event.description}".lower()
        return [warning for warning, words in WARNING_RULES if any(w in text for w in words)]


DEFAULT_CLASSIFIER = KeywordClassifier()


def auto_enhancements(event: Event, classifier=None) -> dict:
    """Explicit event fields where present, classifier output otherwise."""
    classifier = classifier or DEFAULT_CLASSIFIER
    warnings = event.content_warnings
    if warnings is None:
        warnings = classifier.detect_content_warnings(event)
    return {
        "maturity_level": event.maturity_level or classifier.detect_maturity_level(event),
        "category": event.category or classifier.categorize_event(event),
        "content_warnings": list(warnings),
        "risk_level": event.risk or "low",
    }


# ─────────────────────────────────────────────────────
# WRAPPING
# ─────────────────────────────────────────────────────

def enhance_choice(choice: Choice, enhancements: dict = None) -> Choice:
    enhancements = enhancements or {}
    return replace(choice, enhanced=ChoiceEnhancement(
        risk_level=enhancements.get("risk_level") or choice.risk_level or "low",
        maturity_level=enhancements.get("maturity_level") or "teen",
        psychological_effects=dict(enhancements.get("psychological_effects") or {}),
        faction_effects=dict(enhancements.get("faction_effects") or {}),
        long_term_consequences=dict(enhancements.get("long_term_consequences") or {}),
        tags=list(enhancements.get("tags") or []),
    ))


def create_enhanced_event(raw: Event, enhancements: dict = None) -> Event:
    """Copy of raw with the enhanced block attached and top-level metadata filled in."""
    enhancements = enhancements or {}
    meta = EnhancedMeta(
        maturity_level=enhancements.get("maturity_level") or "teen",
        category=enhancements.get("category") or "general",
        content_warnings=list(enhancements.get("content_warnings") or []),
        risk_level=enhancements.get("risk_level") or "low",
        psychological_triggers=list(enhancements.get("psychological_triggers") or []),
    )
    per_choice = enhancements.get("choice_enhancements") or []
    choices = [enhance_choice(c, per_choice[i] if i < len(per_choice) else None)
               for i, c in enumerate(raw.choices)]

    return replace(
        raw,
        maturity_level=raw.maturity_level or meta.maturity_level,
        category=raw.category or meta.category,
        content_warnings=list(raw.content_warnings) if raw.content_warnings is not None
        else list(meta.content_warnings),
        enhanced=meta,
        choices=choices,
    )


def batch_enhance_events(event_map: dict, enhancements: dict = None, classifier=None) -> dict:
    """Enhance a keyed collection, auto-detecting metadata for keys without explicit enhancements."""
    enhancements = enhancements or {}
    enhanced = {}
    for key, event in event_map.items():
        enhanced[key] = create_enhanced_event(event, enhancements.get(key) or auto_enhancements(event, classifier))
    logger.debug(f"Batch enhanced {len(enhanced)} events")
    return enhanced
