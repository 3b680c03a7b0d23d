"""
GigMaster Narrative Engine v1.0 - Faction Reputation
Five fixed factions. Standing thresholds unlock beneficial choices or
inject complications; hated keywords in an event's text cost standing
on every choice.
"""

import logging
from dataclasses import replace

from models import Choice, Event, FactionStatus, NarrativeState, clamp
import config

logger = logging.getLogger("gigmaster.factions")


# ─────────────────────────────────────────────────────
# FACTION REGISTRY
# ─────────────────────────────────────────────────────

REPUTATION_FACTIONS = {
    "underground_scene": {
        "name": "Underground Scene",
        "values": ["authenticity", "rebellion", "anti_establishment", "artistic_integrity"],
        "hates": ["selling_out", "mainstream_success", "corporate_deals", "commercialization"],
        "events_generated": ["underground_venue_offers", "street_cred_opportunities",
                             "anti_establishment_choices"],
        "beneficial_choices": [
            {"id": "underground_support", "text": "Get support from the underground scene",
             "requires_standing": 70, "effects": {"fame": 10, "money": 5000}},
        ],
        "hostile_complications": [
            {"id": "underground_rejection", "text": "The underground scene turns its back on you",
             "triggers_at_standing": -70, "effects": {"fame": -15, "money": -2000}},
        ],
    },
    "industry_insiders": {
        "name": "Corporate Music Industry",
        "values": ["profitability", "marketability", "business_savvy", "brand_safety"],
        "hates": ["unpredictability", "scandal", "anti_industry_stance", "artistic_purity"],
        "events_generated": ["business_opportunities", "label_negotiations", "industry_politics"],
        "beneficial_choices": [
            {"id": "industry_backing", "text": "Call in industry backing",
             "requires_standing": 70, "effects": {"money": 25000, "fame": 20}},
        ],
        "hostile_complications": [
            {"id": "industry_blacklist", "text": "The industry blacklists you",
             "triggers_at_standing": -70, "effects": {"money": -10000, "fame": -25}},
        ],
    },
    "mainstream_media": {
        "name": "Mainstream Media",
        "values": ["controversy", "scandal", "clickbait_potential", "drama"],
        "hates": ["boring_behavior", "privacy", "media_avoidance", "no_drama"],
        "events_generated": ["interview_requests", "scandal_investigations", "publicity_stunts"],
        "beneficial_choices": [
            {"id": "media_coverage", "text": "Spin it into positive coverage",
             "requires_standing": 70, "effects": {"fame": 30}},
        ],
        "hostile_complications": [
            {"id": "negative_press", "text": "A negative press campaign starts",
             "triggers_at_standing": -70, "effects": {"fame": -20, "money": -5000}},
        ],
    },
    "law_enforcement": {
        "name": "Law Enforcement",
        "values": ["law_and_order", "cooperation", "clean_image", "public_safety"],
        "hates": ["criminal_activity", "drug_use", "violence", "non_cooperation"],
        "events_generated": ["investigation_events", "cooperation_requests", "legal_consequences"],
        "beneficial_choices": [
            {"id": "police_protection", "text": "Ask for police protection",
             "requires_standing": 70, "effects": {"safety": True}},
        ],
        "hostile_complications": [
            {"id": "police_scrutiny", "text": "The police start watching you closely",
             "triggers_at_standing": -70, "effects": {"paranoia": 30, "stress": 25}},
        ],
    },
    "criminal_underworld": {
        "name": "Criminal Networks",
        "values": ["loyalty", "silence", "mutual_benefit", "respect"],
        "hates": ["snitching", "betrayal", "law_cooperation", "weakness"],
        "events_generated": ["criminal_offers", "protection_requests", "illegal_opportunities"],
        "beneficial_choices": [
            {"id": "criminal_protection", "text": "Lean on your underworld friends",
             "requires_standing": 70, "effects": {"money": 15000, "safety": True}},
        ],
        "hostile_complications": [
            {"id": "criminal_threat", "text": "Threats arrive from the underworld",
             "triggers_at_standing": -70, "effects": {"paranoia": 40, "stress": 35}},
        ],
    },
}

ALLY_STRESS_RELIEF = {"stress": -5}
COMPLICATION_PENALTY = {"stress": 20, "paranoia": 15}
HATED_KEYWORD_PENALTY = -10


# ─────────────────────────────────────────────────────
# STATUS
# ─────────────────────────────────────────────────────

def get_faction_status(standing: float) -> str:
    if standing > 70:
        return FactionStatus.ALLY.value
    if standing > 30:
        return FactionStatus.FRIENDLY.value
    if standing > -30:
        return FactionStatus.NEUTRAL.value
    if standing > -70:
        return FactionStatus.WARY.value
    return FactionStatus.ENEMY.value


# ─────────────────────────────────────────────────────
# EVENT MODIFICATION
# ─────────────────────────────────────────────────────

def _event_hates(event: Event, hated: str) -> bool:
    text = f"{event.title} {event.description}".lower()
    return hated.replace("_", " ") in text or event.category == hated


def get_faction_modified_events(event: Event, game_state: dict = None,
                                standings: dict = None) -> Event:
    """
    Return a copy of the event with faction-driven choices added and
    hated-keyword penalties written into every choice's psychological_effects.
    """
    if event is None or standings is None:
        return event

    choices = [replace(c, psychological_effects=dict(c.psychological_effects or {}))
               for c in event.choices]
    seen = {c.id for c in choices}

    for fid, faction in REPUTATION_FACTIONS.items():
        standing = standings.get(fid, 0) or 0
        status = get_faction_status(standing)

        if status == FactionStatus.ALLY.value:
            for benefit in faction["beneficial_choices"]:
                cid = f"{fid}_{benefit['id']}"
                if cid in seen:
                    continue
                choices.append(Choice(
                    id=cid, text=benefit["text"], risk_level="low",
                    immediate_effects=dict(benefit["effects"]),
                    psychological_effects=dict(ALLY_STRESS_RELIEF),
                    required_faction_standing={"faction": fid,
                                               "min_standing": benefit["requires_standing"]},
                ))
                seen.add(cid)

        if status == FactionStatus.ENEMY.value:
            for complication in faction["hostile_complications"]:
                cid = f"{fid}_complication"
                if cid in seen or standing > complication["triggers_at_standing"]:
                    continue
                choices.append(Choice(
                    id=cid, text=complication["text"], risk_level="high",
                    immediate_effects=dict(complication["effects"]),
                    psychological_effects=dict(COMPLICATION_PENALTY),
                ))
                seen.add(cid)

        for hated in faction["hates"]:
            if _event_hates(event, hated):
                logger.debug(f"{fid} hates '{hated}' in {event.id}")
                for choice in choices:
                    choice.psychological_effects[fid] = HATED_KEYWORD_PENALTY

    return replace(event, choices=choices)


def is_choice_available(choice: Choice, standings: dict) -> bool:
    required = choice.required_faction_standing
    if not required:
        return True
    faction = required.get("faction")
    minimum = required.get("min_standing", required.get("minStanding", 0))
    return (standings or {}).get(faction, 0) >= minimum


def filter_available_choices(event: Event, standings: dict) -> Event:
    if event is None:
        return event
    return replace(event, choices=[c for c in event.choices if is_choice_available(c, standings)])


def get_faction_probability_modifier(event_category: str, standings: dict) -> float:
    """Multiplier in [0.1, 2.0]: allies attract their events, enemies repel what they hate."""
    modifier = 1.0
    category = event_category or ""
    for fid, faction in REPUTATION_FACTIONS.items():
        status = get_faction_status((standings or {}).get(fid, 0))
        if status == FactionStatus.ALLY.value and any(e in category for e in faction["events_generated"]):
            modifier *= 1.5
        if status == FactionStatus.ENEMY.value and any(h in category for h in faction["hates"]):
            modifier *= 0.5
    return min(2.0, max(0.1, modifier))


# ─────────────────────────────────────────────────────
# STANDING UPDATES
# ─────────────────────────────────────────────────────

def update_faction_reputation(narrative: NarrativeState, faction: str, change: float) -> dict:
    if faction not in REPUTATION_FACTIONS:
        return {"error": f"Unknown faction '{faction}'"}
    old = narrative.faction_standings.get(faction, 0)
    new = clamp(old + change, config.FACTION_MIN_STANDING, config.FACTION_MAX_STANDING)
    narrative.faction_standings[faction] = new
    old_status, new_status = get_faction_status(old), get_faction_status(new)
    if old_status != new_status:
        logger.info(f"{faction}: {old_status} -> {new_status} ({old} -> {new})")
    return {"faction": faction, "old": old, "new": new, "status": new_status}


def apply_faction_effects(narrative: NarrativeState, effects: dict) -> list:
    results = []
    for faction, change in (effects or {}).items():
        if isinstance(change, bool) or not isinstance(change, (int, float)):
            continue
        results.append(update_faction_reputation(narrative, faction, change))
    return results
