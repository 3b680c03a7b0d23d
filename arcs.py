"""
GigMaster Narrative Engine v1.0 - Narrative Arcs
Static arc registry plus the stage machine that drives live storylines.

Each arc instance owns one stage. Stages only move forward; a relapse
resets counters on the instance, never the stage. Addiction and
corruption counters live on the same instance as the stage.
"""

import logging
from typing import Optional

from dice import roll_chance
from models import ArcInstance, NarrativeState, PsychologicalState

logger = logging.getLogger("gigmaster.arcs")


# ─────────────────────────────────────────────────────
# ARC REGISTRY
# ─────────────────────────────────────────────────────

NARRATIVE_ARCS = {
    "addiction_spiral": {
        "name": "Addiction Spiral",
        "stages": [
            "first_exposure",
            "regular_use",
            "dependency_development",
            "rock_bottom",
            "intervention_or_death",
            "recovery_attempt",
            "relapse_or_sobriety",
        ],
        "stage_events": {
            "first_exposure": ["first_hit", "peer_pressure_drugs", "party_drugs"],
            "regular_use": ["hiding_usage", "performance_enhancement", "tolerance_building"],
            "dependency_development": ["withdrawal_symptoms", "stealing_for_drugs", "relationship_damage"],
            "rock_bottom": ["rock_bottom", "overdose", "arrest", "band_ultimatum", "health_crisis"],
            "intervention_or_death": ["family_intervention", "band_intervention", "fatal_overdose"],
            "recovery_attempt": ["recovery_attempt", "rehab_entry", "cold_turkey", "therapy_start"],
            "relapse_or_sobriety": ["sobriety_celebration", "relapse_trigger", "sponsor_relationship"],
        },
        "trigger": {
            "conditions": {"addiction_risk": {"min": 20}, "stress_level": {"min": 40}},
            "probability": 0.3,
        },
    },
    "corruption_path": {
        "name": "Corruption Path",
        "stages": [
            "first_compromise",
            "moral_flexibility",
            "active_corruption",
            "deep_involvement",
            "exposure_or_kingpin",
        ],
        "stage_events": {
            "first_compromise": ["the_offer", "small_bribe", "favor_for_friend", "white_lie"],
            "moral_flexibility": ["the_contract", "bigger_lies", "looking_other_way", "cutting_corners"],
            "active_corruption": ["payola_scheme", "taking_bribes", "illegal_deals", "blackmail"],
            "deep_involvement": ["the_deal", "criminal_enterprise", "violence_orders", "witness_intimidation"],
            "exposure_or_kingpin": ["investigation", "media_exposure", "criminal_empire"],
        },
        "trigger": {
            "conditions": {"moral_integrity": {"max": 80}, "fame": {"min": 30}},
            "probability": 0.25,
        },
    },
    "fame_corruption": {
        "name": "Fame Corruption",
        "stages": ["ego_inflation", "reality_disconnect", "complete_narcissism"],
        "stage_events": {
            "ego_inflation": ["entitlement_events", "diva_behavior", "relationship_strain"],
            "reality_disconnect": ["isolation_events", "poor_judgment", "burned_bridges"],
            "complete_narcissism": ["career_destruction", "loneliness", "redemption_opportunity"],
        },
        "trigger": {
            "conditions": {"fame": {"min": 150}, "moral_integrity": {"max": 60}},
            "probability": 0.4,
        },
    },
    "stalker_obsession": {
        "name": "Stalker Obsession",
        "stages": ["first_contact", "escalating_interest", "dangerous_behavior", "crisis_point", "resolution"],
        "stage_events": {
            "first_contact": ["fan_letter", "backstage_encounter", "gift_received"],
            "escalating_interest": ["repeated_contact", "personal_details_known", "unwanted_presence"],
            "dangerous_behavior": ["the_shrine", "stalking_incident", "threats_made"],
            "crisis_point": ["confinement", "violence", "authorities_involved"],
            "resolution": ["arrest", "restraining_order", "tragic_end", "recovery"],
        },
        "trigger": {
            "conditions": {"fame": {"min": 75}},
            "probability": 0.2,
        },
    },
}

# Generator intensity tier for each arc stage
ADDICTION_TIERS = {
    "first_exposure": "experimental",
    "regular_use": "regular_use",
    "dependency_development": "dependent",
    "rock_bottom": "addicted",
    "intervention_or_death": "addicted",
    "recovery_attempt": "dependent",
    "relapse_or_sobriety": "regular_use",
}

CORRUPTION_TIERS = {
    "first_compromise": "first_compromise",
    "moral_flexibility": "moral_flexibility",
    "active_corruption": "active_corruption",
    "deep_involvement": "deep_involvement",
    "exposure_or_kingpin": "deep_involvement",
    # fame_corruption reuses the corruption generator
    "ego_inflation": "first_compromise",
    "reality_disconnect": "moral_flexibility",
    "complete_narcissism": "active_corruption",
}

# Escalation walks the spiral; later stages are reached only through progress_arc.
ADDICTION_ESCALATION_CEILING = "rock_bottom"
CORRUPTION_ESCALATION_CEILING = "deep_involvement"

ADDICTION_ESCALATION_EFFECTS = {
    "experimental": {"psych": {"addiction_risk": 20}, "band": {"creativity": 10}},
    "regular_use":  {"psych": {"addiction_risk": 30}, "band": {"creativity": 15, "health": -10}},
    "dependent":    {"psych": {"addiction_risk": 40}, "band": {"creativity": 10, "health": -30, "reliability": -20}},
    "addicted":     {"psych": {"addiction_risk": 50}, "band": {"creativity": -10, "health": -50, "reliability": -40}},
}

CORRUPTION_ESCALATION_EFFECTS = {
    "first_compromise":  {"moral_integrity": -20},
    "moral_flexibility": {"moral_integrity": -25, "paranoia": 15},
    "active_corruption": {"moral_integrity": -30, "paranoia": 25},
    "deep_involvement":  {"moral_integrity": -40, "paranoia": 35},
}


def addiction_tier(stage: str) -> str:
    return ADDICTION_TIERS.get(stage, "experimental")


def corruption_tier(stage: str) -> str:
    return CORRUPTION_TIERS.get(stage, "first_compromise")


# ─────────────────────────────────────────────────────
# LOOKUPS
# ─────────────────────────────────────────────────────

def get_current_arc_stage(arc_id: str, narrative: NarrativeState) -> Optional[str]:
    arc = NARRATIVE_ARCS.get(arc_id)
    if not arc or narrative is None:
        return None
    instance = narrative.get_arc(arc_id)
    if instance is None:
        return None
    return instance.stage or arc["stages"][0]


def get_arc_stage_events(arc_id: str, stage: str) -> list:
    arc = NARRATIVE_ARCS.get(arc_id)
    if not arc:
        return []
    return list(arc["stage_events"].get(stage, []))


def get_next_arc_stage(arc_id: str, current_stage: str) -> Optional[str]:
    arc = NARRATIVE_ARCS.get(arc_id)
    if not arc or current_stage not in arc["stages"]:
        return None
    index = arc["stages"].index(current_stage)
    if index == len(arc["stages"]) - 1:
        return None
    return arc["stages"][index + 1]


def get_active_arcs(narrative: NarrativeState) -> list:
    """Live instances whose type is in the registry, paired with their definition."""
    if narrative is None:
        return []
    return [{"instance": inst, "arc": NARRATIVE_ARCS[inst.type]}
            for inst in narrative.ongoing_storylines if inst.type in NARRATIVE_ARCS]


def check_active_arcs(narrative: NarrativeState) -> list:
    """Active arcs whose current stage has candidate events, in storyline order."""
    ready = []
    for entry in get_active_arcs(narrative):
        inst = entry["instance"]
        events = get_arc_stage_events(inst.type, inst.stage)
        if events:
            ready.append({"arc_id": inst.type, "stage": inst.stage, "events": events})
    return ready


def is_arc_stage_event(event_id: str, arc_id: str, stage: str) -> bool:
    """True if the event id is one of the stage's beats (bare or timestamped)."""
    return any(event_id == beat or event_id.startswith(f"{beat}_")
               for beat in get_arc_stage_events(arc_id, stage))


# ─────────────────────────────────────────────────────
# STARTING ARCS
# ─────────────────────────────────────────────────────

def _trigger_value(key: str, game_state: dict, psych: PsychologicalState):
    value = psych.get(key) if psych is not None else None
    if value is None:
        value = (game_state or {}).get(key)
    return value if value is not None else 0


def should_start_arc(arc_id: str, game_state: dict, psych: PsychologicalState, rng=None) -> bool:
    """All trigger ranges must hold, then the arc still has to win its roll."""
    arc = NARRATIVE_ARCS.get(arc_id)
    if not arc or not arc.get("trigger"):
        return False
    trigger = arc["trigger"]
    for key, bounds in trigger.get("conditions", {}).items():
        value = _trigger_value(key, game_state, psych)
        if "min" in bounds and value < bounds["min"]:
            return False
        if "max" in bounds and value > bounds["max"]:
            return False
    if "probability" in trigger:
        return roll_chance(trigger["probability"], rng)
    return True


def check_arc_starts(narrative: NarrativeState, game_state: dict,
                     psych: PsychologicalState, week: int = 0, rng=None) -> list:
    """Roll every inactive arc's start trigger. Returns the ids that started."""
    started = []
    for arc_id, arc in NARRATIVE_ARCS.items():
        if narrative.get_arc(arc_id) is not None:
            continue
        if not should_start_arc(arc_id, game_state, psych, rng):
            continue
        result = progress_arc(narrative, arc_id, arc["stages"][0], week)
        if result.get("success"):
            if arc_id == "addiction_spiral":
                narrative.get_arc(arc_id).relapse_risk = 0.15
            started.append(arc_id)
    return started


# ─────────────────────────────────────────────────────
# STAGE MACHINE
# ─────────────────────────────────────────────────────

def progress_arc(narrative: NarrativeState, arc_type: str, new_stage: str, week: int = 0) -> dict:
    """
    Upsert an arc instance at new_stage. The stage must be declared for the
    arc and must not precede the current one; skipping ahead is allowed.
    """
    arc = NARRATIVE_ARCS.get(arc_type)
    if not arc:
        return {"error": f"Unknown arc '{arc_type}'"}
    stages = arc["stages"]
    if new_stage not in stages:
        logger.warning(f"Rejected {arc_type} -> {new_stage}: not a declared stage")
        return {"error": f"'{new_stage}' is not a stage of {arc_type}"}

    instance = narrative.get_arc(arc_type)
    if instance is None:
        instance = ArcInstance(type=arc_type, stage=new_stage,
                               start_week=week, last_progress_week=week)
        narrative.ongoing_storylines.append(instance)
        logger.info(f"Arc started: {arc_type} at {new_stage} (week {week})")
        return {"success": True, "arc": arc_type, "old_stage": None,
                "new_stage": new_stage, "created": True}

    old_stage = instance.stage
    if old_stage in stages and stages.index(new_stage) < stages.index(old_stage):
        logger.warning(f"Rejected {arc_type} rollback {old_stage} -> {new_stage}")
        return {"error": f"Cannot move {arc_type} back from {old_stage} to {new_stage}"}

    instance.stage = new_stage
    instance.last_progress_week = week
    if old_stage != new_stage:
        logger.info(f"Arc progressed: {arc_type} {old_stage} -> {new_stage} (week {week})")
    return {"success": True, "arc": arc_type, "old_stage": old_stage,
            "new_stage": new_stage, "created": False}


def _escalate(narrative: NarrativeState, arc_type: str, ceiling: str, stages: int, week: int) -> dict:
    instance = narrative.get_arc(arc_type)
    if instance is None:
        return {"error": f"No active {arc_type} arc"}
    declared = NARRATIVE_ARCS[arc_type]["stages"]
    current = declared.index(instance.stage) if instance.stage in declared else 0
    limit = max(current, declared.index(ceiling))
    target = declared[min(current + max(stages, 0), limit)]
    return progress_arc(narrative, arc_type, target, week)


# ─────────────────────────────────────────────────────
# ADDICTION
# ─────────────────────────────────────────────────────

def start_addiction_progression(narrative: NarrativeState, psych: PsychologicalState,
                                substance: str = "", week: int = 0) -> dict:
    if narrative.addiction_progression is not None:
        return {"error": "Addiction arc already active"}
    result = progress_arc(narrative, "addiction_spiral", "first_exposure", week)
    instance = narrative.addiction_progression
    instance.substance = substance
    instance.relapse_risk = 0.15
    psych.update({"addiction_risk": 20, "stress_level": -10})
    return result


def escalate_addiction(narrative: NarrativeState, psych: PsychologicalState,
                       stages: int = 1, week: int = 0) -> dict:
    """Push the addiction arc toward rock bottom and apply the new tier's effects."""
    result = _escalate(narrative, "addiction_spiral", ADDICTION_ESCALATION_CEILING, stages, week)
    if "error" in result:
        return result
    instance = narrative.addiction_progression
    index = NARRATIVE_ARCS["addiction_spiral"]["stages"].index(instance.stage)
    instance.relapse_risk = min(1.0, 0.15 + index * 0.25)
    instance.weeks_clean = 0

    tier = addiction_tier(instance.stage)
    effects = ADDICTION_ESCALATION_EFFECTS[tier]
    psych.update(effects["psych"])
    result.update({"tier": tier, "relapse_risk": instance.relapse_risk,
                   "psych_effects": effects["psych"], "band_effects": effects["band"]})
    return result


def record_clean_week(narrative: NarrativeState, week: int = 0) -> dict:
    instance = narrative.addiction_progression
    if instance is None:
        return {"error": "No active addiction arc"}
    instance.weeks_clean += 1
    instance.relapse_risk = max(0.0, round(instance.relapse_risk - 0.05, 4))
    return {"weeks_clean": instance.weeks_clean, "relapse_risk": instance.relapse_risk}


def record_relapse(narrative: NarrativeState, psych: PsychologicalState, week: int = 0) -> dict:
    """Counters reset; the stage stays where it is."""
    instance = narrative.addiction_progression
    if instance is None:
        return {"error": "No active addiction arc"}
    lost = instance.weeks_clean
    instance.weeks_clean = 0
    instance.relapses += 1
    instance.relapse_risk = min(1.0, instance.relapse_risk + 0.2)
    instance.last_progress_week = week
    psych.update({"addiction_risk": 15, "depression": 10})
    logger.info(f"Relapse after {lost} clean weeks (week {week})")
    return {"stage": instance.stage, "weeks_clean_lost": lost,
            "relapses": instance.relapses, "relapse_risk": instance.relapse_risk}


# ─────────────────────────────────────────────────────
# CORRUPTION
# ─────────────────────────────────────────────────────

def start_corruption_path(narrative: NarrativeState, psych: PsychologicalState,
                          deal_type: str, week: int = 0) -> dict:
    if narrative.corruption_progression is not None:
        return {"error": "Corruption arc already active"}
    result = progress_arc(narrative, "corruption_path", "first_compromise", week)
    narrative.corruption_progression.deals_made.append({"type": deal_type, "week": week})
    psych.update({"moral_integrity": -20, "stress_level": 15, "paranoia": 10})
    return result


def escalate_corruption(narrative: NarrativeState, psych: PsychologicalState,
                        deal_type: str, week: int = 0) -> dict:
    result = _escalate(narrative, "corruption_path", CORRUPTION_ESCALATION_CEILING, 1, week)
    if "error" in result:
        return result
    instance = narrative.corruption_progression
    instance.deals_made.append({"type": deal_type, "week": week})
    effects = CORRUPTION_ESCALATION_EFFECTS.get(corruption_tier(instance.stage), {})
    psych.update(effects)
    result.update({"deals_made": len(instance.deals_made), "psych_effects": effects})
    return result
