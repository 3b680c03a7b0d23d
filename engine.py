"""
GigMaster Narrative Engine v1.0 - Event Orchestrator
Decides which event to show and shapes its choices. Each call:
1. Arc continuation (first active arc with candidate beats)
2. Contextual specific event (venue, fame, money, psych thresholds)
3. Weighted procedural category (substance / corruption / horror)
4. Template fallback, then a default substance event
5. Archetype adaptation + faction modification + availability filter
6. Enhancement + content filter, regenerating up to MAX_FILTER_RETRIES times

Every branch degrades to the next one; the call always returns an Event.
"""

import logging
from dataclasses import replace
from typing import Optional

import config
from dice import roll_chance, pick_one, cumulative_draw
from models import Event, NarrativeState, PsychologicalState
from arcs import check_active_arcs
from archetypes import adapt_event_to_archetype
from catalog import (build_beat_event, has_beat, generate_for_arc_stage,
                     generate_substance_event, generate_corruption_event, generate_horror_event)
from templates import generate_from_template, TEMPLATE_TYPES
from factions import get_faction_modified_events, filter_available_choices
from enhancement import create_enhanced_event, auto_enhancements
from content_filter import should_show_event

logger = logging.getLogger("gigmaster.engine")

CATEGORIES = ("substance", "corruption", "horror")


# ─────────────────────────────────────────────────────
# PSYCHOLOGICAL WEIGHTING
# ─────────────────────────────────────────────────────

def calculate_event_weights(psych: Optional[PsychologicalState]) -> dict:
    """Category weights (normalized) plus headroom/crisis filter flags."""
    if psych is None:
        return {"substance": 0.33, "corruption": 0.33, "horror": 0.34, "filters": {}}

    weights = {"substance": 0.1, "corruption": 0.1, "horror": 0.1}
    filters = {
        "max_stress_increase": 100 - psych.stress_level,
        "max_addiction_increase": 100 - psych.addiction_risk,
        "min_morality_decrease": psych.moral_integrity,
        "min_paranoia_increase": 100 - psych.paranoia,
    }

    if psych.stress_level > 60:
        weights["horror"] += (psych.stress_level - 60) * 0.01
    if psych.addiction_risk > 40:
        weights["substance"] += (psych.addiction_risk - 40) * 0.01
    if psych.moral_integrity < 60:
        weights["corruption"] += (60 - psych.moral_integrity) * 0.01
    if psych.paranoia > 40:
        weights["horror"] += (psych.paranoia - 40) * 0.008
    if psych.depression > 50:
        weights["horror"] += (psych.depression - 50) * 0.01

    if psych.stress_level > 85:
        weights["horror"] += 0.2
        filters["mental_breakdown_risk"] = True
    if psych.addiction_risk > 80:
        weights["substance"] += 0.15
        filters["addiction_crisis_risk"] = True

    total = sum(weights.values())
    result = {k: v / total for k, v in weights.items()}
    result["filters"] = filters
    return result


def select_event_type_by_weights(weights: dict, rng=None) -> str:
    ordered = {k: weights.get(k, 0) for k in CATEGORIES}
    return cumulative_draw(ordered, rng, fallback="horror")


def generate_category_event(category: str, narrative: Optional[NarrativeState],
                            psych: Optional[PsychologicalState], rng=None) -> Optional[Event]:
    """Base generator for a category, at the live arc's stage where one exists."""
    if category == "substance":
        arc = narrative.addiction_progression if narrative is not None else None
        return generate_substance_event(arc.stage if arc else "experimental", psych, rng)
    if category == "corruption":
        arc = narrative.corruption_progression if narrative is not None else None
        return generate_corruption_event(arc.stage if arc else "first_compromise", rng)
    if category == "horror":
        return generate_horror_event(rng)
    return None


# ─────────────────────────────────────────────────────
# CONTEXTUAL SELECTION
# ─────────────────────────────────────────────────────

VENUE_EVENTS = {
    "dive_bar": ["dive_bar_brawl", "small_bribe"],
    "club": ["backstage_encounter", "peer_pressure_drugs"],
    "warehouse": ["party_drugs", "dive_bar_brawl"],
    "festival": ["festival_afterparty", "party_drugs"],
    "theater": ["industry_party", "backstage_encounter"],
    "arena": ["fan_letter", "viral_moment"],
    "stadium": ["fan_letter", "viral_moment"],
}

VENUE_NAME_HINTS = (
    ("bar", "dive_bar"),
    ("pub", "dive_bar"),
    ("club", "club"),
    ("warehouse", "warehouse"),
    ("fest", "festival"),
    ("theat", "theater"),
    ("arena", "arena"),
    ("stadium", "stadium"),
)


def _venue_kind(venue: dict) -> str:
    if not venue:
        return ""
    kind = (venue.get("type") or "").lower()
    if kind:
        return kind
    name = (venue.get("name") or "").lower()
    for hint, mapped in VENUE_NAME_HINTS:
        if hint in name:
            return mapped
    return ""


def specific_event_candidates(game_state: dict, psych: Optional[PsychologicalState],
                              context: dict = None) -> list:
    game_state = game_state or {}
    context = context or {}
    fame = game_state.get("fame", 0) or 0
    money = game_state.get("money", 0) or 0
    week = game_state.get("week", 0) or 0
    has_deal = bool(game_state.get("has_label_deal"))
    venue_events = VENUE_EVENTS.get(_venue_kind(game_state.get("current_venue")), [])

    candidates = []
    if context.get("post_gig"):
        # Venue beats count twice after a gig
        candidates += venue_events * 2
    else:
        candidates += venue_events

    if money < 0:
        candidates.append("debt_collector")
    elif money < 500 and fame >= 20:
        candidates.append("small_bribe")

    if has_deal:
        candidates.append("label_pressure")
    elif fame >= 40:
        candidates.append("the_contract")
    if fame >= 50:
        candidates.append("industry_party")
    if fame >= 60:
        candidates.append("fan_letter")
    if fame >= 80:
        candidates.append("payola_scheme")
    if fame >= 100:
        candidates.append("viral_moment")

    if psych is not None:
        if psych.stress_level > 70 or (week >= 20 and psych.stress_level > 50):
            candidates.append("burnout_warning")
        if psych.addiction_risk > 60:
            candidates.append("withdrawal_symptoms")
        if psych.depression > 60:
            candidates.append("therapy_start")

    return [c for c in candidates if has_beat(c)]


def select_specific_event(event_type: str = "random", context: dict = None,
                          game_state: dict = None, psych: Optional[PsychologicalState] = None,
                          rng=None) -> Optional[str]:
    """
    Beat id to force this call, or None. A candidate is used with
    probability 0.5 after a gig and 0.3 otherwise.
    """
    context = context or {}
    candidates = specific_event_candidates(game_state, psych, context)
    if not candidates:
        return None
    chance = config.POST_GIG_SPECIFIC_CHANCE if context.get("post_gig") else config.SPECIFIC_EVENT_CHANCE
    if not roll_chance(chance, rng):
        return None
    chosen = pick_one(candidates, rng)
    logger.debug(f"Specific event for {event_type}: {chosen} from {candidates}")
    return chosen


# ─────────────────────────────────────────────────────
# ADAPTATION
# ─────────────────────────────────────────────────────

def _adapt(event: Event, narrative: Optional[NarrativeState]) -> Event:
    if narrative is None:
        return event
    archetype = narrative.player_archetype or {}
    if archetype.get("detected") and archetype.get("primary"):
        event = adapt_event_to_archetype(event, archetype["primary"])
    if narrative.faction_standings:
        event = get_faction_modified_events(event, None, narrative.faction_standings)
        event = filter_available_choices(event, narrative.faction_standings)
    return event


def _finish(event: Event, narrative: Optional[NarrativeState], classifier) -> Event:
    event = _adapt(event, narrative)
    return create_enhanced_event(event, auto_enhancements(event, classifier))


# ─────────────────────────────────────────────────────
# ORCHESTRATOR
# ─────────────────────────────────────────────────────

def _arc_continuation(game_state, psych, narrative, features, classifier, rng) -> Optional[Event]:
    ready = check_active_arcs(narrative)
    if not ready:
        return None
    arc = ready[0]
    beat = pick_one(arc["events"], rng)
    event = generate_for_arc_stage(arc["arc_id"], arc["stage"], beat, game_state, psych, rng)
    if event is None:
        return None
    event = replace(event, arc_id=arc["arc_id"], arc_stage=arc["stage"], source="arc")
    event = _finish(event, narrative, classifier)
    if should_show_event(event, features):
        logger.info(f"Arc event {beat} ({arc['arc_id']}/{arc['stage']})")
        return event
    logger.info(f"Arc event {beat} blocked by preferences, falling through")
    return None


def generate_event(game_state: dict = None, psych: Optional[PsychologicalState] = None,
                   narrative: Optional[NarrativeState] = None, event_type: str = "random",
                   context: dict = None, enhanced_features: dict = None,
                   classifier=None, rng=None, depth: int = 0) -> Event:
    """
    Produce one event. event_type is "random", a category (substance,
    corruption, horror), "template", or a catalog beat id.
    depth counts regenerations after the content filter blocked an event.
    """
    game_state = game_state or {}
    context = context or {}
    features = enhanced_features or {}
    event = None

    # ── Forced types ──
    if event_type == "template":
        event = generate_from_template(pick_one(TEMPLATE_TYPES, rng), game_state, context, rng)
        if event is not None:
            event = replace(event, source="template")
    elif has_beat(event_type):
        event = replace(build_beat_event(event_type, game_state, rng), source="specific")

    if event is None and event_type == "random":
        # ── 1. Arc continuation ──
        arc_event = _arc_continuation(game_state, psych, narrative, features, classifier, rng)
        if arc_event is not None:
            return replace(arc_event, extra={**arc_event.extra, "filter_retries": depth})

        # ── 2. Specific contextual selection ──
        beat = select_specific_event(event_type, context, game_state, psych, rng)
        if beat:
            event = replace(build_beat_event(beat, game_state, rng), source="specific")

    # ── 3. Weighted procedural category ──
    if event is None:
        category = event_type
        if event_type == "random":
            weights = calculate_event_weights(psych)
            category = select_event_type_by_weights(weights, rng)
            logger.debug(f"Weighted draw -> {category} ({weights})")
        event = generate_category_event(category, narrative, psych, rng)
        if event is not None:
            event = replace(event, source="procedural")

    # ── 4. Template fallback / default ──
    if event is None and roll_chance(config.TEMPLATE_FALLBACK_CHANCE, rng):
        event = generate_from_template(pick_one(TEMPLATE_TYPES, rng), game_state, context, rng)
        if event is not None:
            event = replace(event, source="template")
    if event is None:
        event = replace(generate_substance_event("experimental", psych, rng), source="fallback")

    # ── 5 + 6. Adaptation, enhancement ──
    event = _finish(event, narrative, classifier)
    event = replace(event, extra={**event.extra, "filter_retries": depth})

    # ── 6. Content filter with bounded regeneration ──
    if features.get("enabled") and not should_show_event(event, features):
        if depth < config.MAX_FILTER_RETRIES:
            return generate_event(game_state, psych, narrative, "random", context,
                                  features, classifier, rng, depth + 1)
        logger.info(f"Filter retries exhausted, returning blocked event {event.id}")
    return event
