"""
GigMaster Narrative Engine v1.0 - Player Archetypes
Scores six behavioural profiles from choice history and psychological
state, then biases event choices toward the detected profile.

Detection is advisory: it annotates choices with appeal_boost and never
removes anything.
"""

import logging
from dataclasses import replace, is_dataclass, asdict
from typing import Optional

from models import Event, PsychologicalState
import config

logger = logging.getLogger("gigmaster.archetypes")


# ─────────────────────────────────────────────────────
# PROFILES
# ─────────────────────────────────────────────────────

PSYCHOLOGICAL_PROFILES = {
    "risk_seeker": {
        "id": "risk_seeker",
        "name": "Risk Seeker",
        "description": "Thrives on danger and extreme choices",
        "choice_preferences": {"risky": 30, "safe": -20, "extreme": 40},
        "event_magnets": ["substance_opportunities", "dangerous_venues", "criminal_offers", "violence"],
        "psychological_traits": {"stress_tolerance": "high", "addiction_susceptibility": "high",
                                 "moral_flexibility": "high"},
        "event_modifications": {"increase_risk_appeal": True, "amplify_consequences": False,
                                "unlock_extreme_choices": True},
    },
    "people_pleaser": {
        "id": "people_pleaser",
        "name": "People Pleaser",
        "description": "Avoids conflict and seeks harmony",
        "choice_preferences": {"confrontational": -30, "harmonious": 25, "diplomatic": 20},
        "event_magnets": ["manipulation_attempts", "peer_pressure", "relationship_drama", "social_conflicts"],
        "psychological_traits": {"stress_tolerance": "low", "addiction_susceptibility": "medium",
                                 "moral_flexibility": "medium"},
        "event_modifications": {"increase_risk_appeal": False, "amplify_consequences": True,
                                "unlock_extreme_choices": False},
    },
    "moral_compass": {
        "id": "moral_compass",
        "name": "Moral Compass",
        "description": "Strong ethical principles guide decisions",
        "choice_preferences": {"ethical": 30, "corrupt": -40, "principled": 25},
        "event_magnets": ["moral_dilemmas", "ethical_tests", "corruption", "justice_opportunities"],
        "psychological_traits": {"stress_tolerance": "medium", "addiction_susceptibility": "low",
                                 "moral_flexibility": "low"},
        "event_modifications": {"increase_risk_appeal": False, "amplify_consequences": True,
                                "unlock_extreme_choices": False},
    },
    "pragmatist": {
        "id": "pragmatist",
        "name": "Pragmatist",
        "description": "Makes decisions based on practical outcomes",
        "choice_preferences": {"practical": 25, "idealistic": -15, "calculated": 20},
        "event_magnets": ["business_opportunities", "financial_decisions", "strategic_choices",
                          "resource_management"],
        "psychological_traits": {"stress_tolerance": "medium", "addiction_susceptibility": "medium",
                                 "moral_flexibility": "high"},
        "event_modifications": {"increase_risk_appeal": False, "amplify_consequences": False,
                                "unlock_extreme_choices": False},
    },
    "self_destructive": {
        "id": "self_destructive",
        "name": "Self-Destructive",
        "description": "Consistently makes choices that harm themselves",
        "choice_preferences": {"harmful": 35, "healthy": -25, "extreme": 30},
        "event_magnets": ["substance_abuse", "dangerous_behavior", "relationship_sabotage",
                          "career_destruction"],
        "psychological_traits": {"stress_tolerance": "low", "addiction_susceptibility": "very_high",
                                 "moral_flexibility": "medium"},
        "event_modifications": {"increase_risk_appeal": True, "amplify_consequences": True,
                                "unlock_extreme_choices": True},
    },
    "survivor": {
        "id": "survivor",
        "name": "Survivor",
        "description": "Adapts and overcomes challenges",
        "choice_preferences": {"adaptive": 25, "rigid": -20, "resilient": 20},
        "event_magnets": ["crisis_events", "recovery_opportunities", "adaptation_challenges",
                          "resilience_tests"],
        "psychological_traits": {"stress_tolerance": "very_high", "addiction_susceptibility": "low",
                                 "moral_flexibility": "medium"},
        "event_modifications": {"increase_risk_appeal": False, "amplify_consequences": False,
                                "unlock_extreme_choices": False},
    },
}

# Earlier entries win ties.
ARCHETYPE_PRIORITY = (
    "risk_seeker",
    "people_pleaser",
    "moral_compass",
    "pragmatist",
    "self_destructive",
    "survivor",
)


# ─────────────────────────────────────────────────────
# DETECTION
# ─────────────────────────────────────────────────────

def _as_dict(entry) -> dict:
    if is_dataclass(entry):
        return asdict(entry)
    return entry or {}


def _effect(effects: dict, *keys) -> float:
    total = 0
    for key in keys:
        value = effects.get(key, 0)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total += value
    return total


def _text_has(text: str, *words) -> bool:
    return any(w in text for w in words)


def score_choices(choice_history: list, psych: Optional[PsychologicalState]) -> dict:
    scores = {aid: 0 for aid in ARCHETYPE_PRIORITY}

    for raw in choice_history or []:
        entry = _as_dict(raw)
        risk = entry.get("risk_level") or "medium"
        effects = entry.get("psychological_effects") or {}
        immediate = entry.get("immediate_effects") or {}
        text = (entry.get("text") or "").lower()

        addiction = _effect(effects, "addiction_risk", "addiction")
        moral = _effect(effects, "moral_integrity", "morality")
        stress = _effect(effects, "stress_level", "stress")
        depression = _effect(effects, "depression")
        health = _effect(effects, "health") + _effect(immediate, "health")

        if risk in ("extreme", "high"):
            scores["risk_seeker"] += 2
        if addiction > 0:
            scores["risk_seeker"] += 1
            scores["self_destructive"] += 1

        if _text_has(text, "avoid", "diplomatic", "harmony"):
            scores["people_pleaser"] += 2

        if moral > 0:
            scores["moral_compass"] += 2
        if moral < 0:
            scores["moral_compass"] -= 1
            scores["pragmatist"] += 1

        if _effect(immediate, "money") > 0 or _effect(immediate, "fame") > 0:
            scores["pragmatist"] += 1

        if stress > 20 or depression > 20:
            scores["self_destructive"] += 1
        if health < 0 or addiction > 30:
            scores["self_destructive"] += 2

        if _text_has(text, "recover", "adapt", "overcome"):
            scores["survivor"] += 2

    if psych is not None:
        if psych.stress_level > 80:
            scores["self_destructive"] += 2
        if psych.moral_integrity > 70:
            scores["moral_compass"] += 2
        if psych.addiction_risk > 60:
            scores["risk_seeker"] += 2
            scores["self_destructive"] += 2
        if psych.stress_level < 40 and psych.moral_integrity > 50:
            scores["survivor"] += 2

    return scores


def detect_archetype_from_choices(choice_history: list,
                                  psych: Optional[PsychologicalState] = None) -> Optional[dict]:
    """Winning profile, or None with no history or a top score under 3."""
    if not choice_history:
        return None

    scores = score_choices(choice_history, psych)
    best_id, best_score = None, None
    for aid in ARCHETYPE_PRIORITY:
        if best_score is None or scores[aid] > best_score:
            best_id, best_score = aid, scores[aid]

    if best_score < config.ARCHETYPE_MIN_SCORE:
        return None
    return PSYCHOLOGICAL_PROFILES[best_id]


def detect_player_archetype(narrative, choice_history: list,
                            psych: Optional[PsychologicalState] = None) -> dict:
    """Classify and write the result into narrative.player_archetype."""
    detected = detect_archetype_from_choices(choice_history, psych)
    primary, secondary = None, None

    if detected:
        primary = detected["id"]
        if psych is not None:
            if psych.moral_integrity > 70 and primary != "moral_compass":
                secondary = "moral_compass"
            elif psych.addiction_risk > 60 and primary != "self_destructive":
                secondary = "self_destructive"
            elif psych.stress_level < 40 and primary != "survivor":
                secondary = "survivor"

    old_primary = narrative.player_archetype.get("primary")
    narrative.player_archetype = {
        "primary": primary,
        "secondary": secondary,
        "detected": detected is not None,
        "reputation_modifiers": dict(detected["event_modifications"]) if detected else {},
    }
    if primary != old_primary:
        logger.info(f"Archetype changed: {old_primary} -> {primary} (secondary {secondary})")
    return narrative.player_archetype


# ─────────────────────────────────────────────────────
# ADAPTATION
# ─────────────────────────────────────────────────────

def _adapt_choice(choice, archetype_id: str):
    risk = choice.risk_level or "medium"
    text = (choice.text or "").lower()
    effects = dict(choice.psychological_effects or {})
    boost = choice.appeal_boost

    if archetype_id == "risk_seeker":
        if risk in ("extreme", "high"):
            effects["stress"] = effects.get("stress", 0) - 5
            boost = 20
        if risk in ("low", "safe"):
            boost = -15

    elif archetype_id == "people_pleaser":
        if _text_has(text, "confront", "fight", "refuse"):
            boost = -20
            effects["stress"] = effects.get("stress", 0) + 10
        if _text_has(text, "diplomatic", "harmony", "compromise"):
            boost = 15

    elif archetype_id == "moral_compass":
        moral = _effect(effects, "moral_integrity", "morality")
        if moral > 0:
            boost = 20
        if moral < -10:
            boost = -25

    elif archetype_id == "pragmatist":
        immediate = choice.immediate_effects or {}
        if _effect(immediate, "money") > 0 or _effect(immediate, "fame") > 0:
            boost = 15

    elif archetype_id == "self_destructive":
        harm = _effect(effects, "stress", "stress_level", "depression", "addiction_risk", "addiction")
        if harm > 20:
            boost = 15
        if harm < 0:
            boost = -20

    elif archetype_id == "survivor":
        if _text_has(text, "recover", "adapt", "overcome"):
            boost = 20

    return replace(choice, psychological_effects=effects, appeal_boost=boost)


def adapt_event_to_archetype(event: Event, archetype) -> Event:
    """archetype is a profile dict or an archetype id."""
    if event is None or not archetype:
        return event
    profile = PSYCHOLOGICAL_PROFILES.get(archetype) if isinstance(archetype, str) else archetype
    if not profile:
        return event

    choices = [_adapt_choice(c, profile["id"]) for c in event.choices]
    category = event.category or ""
    magnet = any(m in category for m in profile.get("event_magnets", []))
    return replace(event, choices=choices, archetype_boost=event.archetype_boost or magnet)
