"""
GigMaster Narrative Engine v1.0 - Psychological State Store
Bounded metric updates, trauma records, coping mechanisms and crises.

Unhealthy coping buys more short-term stress relief than healthy coping
and pays for it with paranoia and addiction risk. Keep the asymmetry.
"""

import logging
from typing import Optional

from dice import roll_chance
from models import PsychologicalState, FACTION_IDS, make_event_id

logger = logging.getLogger("gigmaster.psychology")


# ─────────────────────────────────────────────────────
# TABLES
# ─────────────────────────────────────────────────────

TRAUMA_EFFECTS = {
    "minor":    {"stress_level": 8,  "paranoia": 5,  "depression": 2},
    "moderate": {"stress_level": 15, "paranoia": 10, "depression": 5},
    "severe":   {"stress_level": 30, "paranoia": 20, "depression": 15},
    "critical": {"stress_level": 40, "paranoia": 30, "depression": 25},
}

COPING_EFFECTS = {
    "healthy":   {"stress_level": -15, "depression": -10},
    "unhealthy": {"stress_level": -20, "paranoia": 10, "addiction_risk": 5},
}

CRISIS_EFFECTS = {
    "paranoia":   {"paranoia": 40, "stress_level": 35},
    "depression": {"depression": 50, "stress_level": 30, "addiction_risk": 15},
    "psychosis":  {"paranoia": 50, "depression": 40, "stress_level": 50},
    "breakdown":  {"stress_level": 100, "depression": 60, "paranoia": 30},
}
DEFAULT_CRISIS_EFFECT = {"stress_level": 30}

# Shorthand keys used by choice payloads -> canonical metric
EFFECT_ALIASES = {
    "stress": "stress_level",
    "stress_level": "stress_level",
    "morality": "moral_integrity",
    "moral_integrity": "moral_integrity",
    "addiction": "addiction_risk",
    "addiction_risk": "addiction_risk",
    "paranoia": "paranoia",
    "depression": "depression",
}


# ─────────────────────────────────────────────────────
# CORE OPERATIONS
# ─────────────────────────────────────────────────────

def update_psychological_state(psych: PsychologicalState, updates: dict) -> dict:
    return psych.update(updates)


def add_trauma(psych: PsychologicalState, trauma_type: str, description: str,
               severity: str = "moderate", week: int = 0) -> dict:
    """Append a trauma record and apply its fixed effect bundle."""
    effects = dict(TRAUMA_EFFECTS.get(severity, TRAUMA_EFFECTS["moderate"]))
    trauma = {
        "id": make_event_id("trauma"),
        "type": trauma_type,
        "description": description,
        "severity": severity,
        "week": week,
        "effects": effects,
    }
    psych.trauma_history = psych.trauma_history + [trauma]
    psych.update(effects)
    logger.info(f"Trauma recorded: {trauma_type} ({severity}) week {week}")
    return trauma


def add_coping_mechanism(psych: PsychologicalState, mechanism: str,
                         coping_type: str = "unhealthy", week: int = 0) -> dict:
    if coping_type not in COPING_EFFECTS:
        return {"error": f"Unknown coping type '{coping_type}'. Use healthy or unhealthy."}
    entry = {"mechanism": mechanism, "type": coping_type, "week": week}
    psych.coping_mechanisms = psych.coping_mechanisms + [entry]
    psych.update(COPING_EFFECTS[coping_type])
    return {"success": True, "coping": entry, "effects": COPING_EFFECTS[coping_type]}


def trigger_psychological_crisis(psych: PsychologicalState, crisis_type: str,
                                 week: int = 0) -> dict:
    """Apply a large crisis bundle, then record a severe trauma of matching type."""
    effects = CRISIS_EFFECTS.get(crisis_type, DEFAULT_CRISIS_EFFECT)
    psych.update(effects)
    logger.info(f"Psychological crisis: {crisis_type}")
    trauma = add_trauma(psych, f"psychological_{crisis_type}",
                        f"Suffered from {crisis_type}", "severe", week)
    return {"crisis": crisis_type, "effects": effects, "trauma": trauma}


# ─────────────────────────────────────────────────────
# CHOICE RESOLUTION HELPERS
# ─────────────────────────────────────────────────────

def split_effects(effects: dict) -> tuple:
    """
    Split a choice's psychological_effects into (metric_deltas, faction_deltas).
    Faction ids end up here when a faction's hates match the event text.
    """
    metrics = {}
    factions = {}
    for key, value in (effects or {}).items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if key in FACTION_IDS:
            factions[key] = factions.get(key, 0) + value
        elif key in EFFECT_ALIASES:
            metric = EFFECT_ALIASES[key]
            metrics[metric] = metrics.get(metric, 0) + value
    return metrics, factions


def apply_psychological_effects(psych: PsychologicalState, effects: dict) -> dict:
    if not effects:
        return {"success": False, "message": "No psychological effects to apply"}

    metrics, _ = split_effects(effects)
    metrics = {k: v for k, v in metrics.items() if v != 0}
    if not metrics:
        return {"success": False, "message": "No psychological effects to apply"}

    psych.update(metrics)
    applied = [f"{k} {'+' if v > 0 else ''}{v}" for k, v in metrics.items()]
    return {"success": True, "applied": applied, "updates": metrics}


def check_trauma_trigger(psych: PsychologicalState, trauma_risk: Optional[dict],
                         week: int = 0, rng=None) -> Optional[dict]:
    """Roll a choice's trauma risk at resolution time. Returns the trauma record on a hit."""
    if not trauma_risk:
        return None
    if not roll_chance(trauma_risk.get("probability", 0), rng):
        return None
    return add_trauma(
        psych,
        trauma_risk.get("type", "unknown"),
        trauma_risk.get("description", ""),
        trauma_risk.get("severity", "moderate"),
        week,
    )


def get_consequences_preview(choice) -> dict:
    """What the UI can show before the player commits to a choice."""
    long_term = choice.long_term_effects or {}
    return {
        "immediate": choice.immediate_effects or {},
        "short_term": long_term.get("short_term", {}),
        "long_term": long_term.get("long_term", {}),
        "psychological": choice.psychological_effects or {},
    }
