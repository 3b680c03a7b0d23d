"""
GigMaster Narrative Engine v1.0 - Scenario Presets
Starting points for a new session: the game snapshot the engine reads,
the player's psychological profile, faction standings and any storyline
already in progress. Edit this file to add presets.
"""

import copy

from models import PsychologicalState, NarrativeState, ArcInstance, FACTION_IDS


SCENARIOS = {
    "standard": {
        "description": "Fresh band, empty bank account, first booking at the local dive bar.",
        "game_state": {
            "band_name": "The Static Hearts",
            "week": 0,
            "fame": 5,
            "money": 200,
            "current_venue": {"name": "The Rusty Nail", "type": "dive_bar"},
            "has_label_deal": False,
        },
        "psych": {},
        "standings": {},
        "arcs": [],
        "flags": {"gritty": False},
    },
    "gritty": {
        "description": "Broke, stressed and already in debt to the wrong people.",
        "game_state": {
            "band_name": "Rust Belt Saints",
            "week": 0,
            "fame": 15,
            "money": -300,
            "current_venue": {"name": "The Warehouse on 9th", "type": "warehouse"},
            "has_label_deal": False,
        },
        "psych": {"stress_level": 55, "addiction_risk": 20, "moral_integrity": 75, "depression": 20},
        "standings": {"underground_scene": 30, "law_enforcement": -20, "criminal_underworld": 15},
        "arcs": [],
        "flags": {"gritty": True},
    },
    "rising_star": {
        "description": "A viral single, a label deal and a lot of new friends.",
        "game_state": {
            "band_name": "Neon Undertow",
            "week": 0,
            "fame": 70,
            "money": 5000,
            "current_venue": {"name": "Grand Theater", "type": "theater"},
            "has_label_deal": True,
        },
        "psych": {"stress_level": 40},
        "standings": {"industry_insiders": 40, "mainstream_media": 30, "underground_scene": -10},
        "arcs": [],
        "flags": {"gritty": False},
    },
    "comeback": {
        "description": "A fallen headliner fresh out of rehab, trying again.",
        "game_state": {
            "band_name": "Velvet Wreckage",
            "week": 0,
            "fame": 45,
            "money": 800,
            "current_venue": {"name": "Blackout Club", "type": "club"},
            "has_label_deal": False,
        },
        "psych": {"stress_level": 50, "addiction_risk": 45, "moral_integrity": 70, "depression": 40},
        "standings": {"mainstream_media": -30, "industry_insiders": -20},
        "arcs": [{"type": "addiction_spiral", "stage": "recovery_attempt",
                  "substance": "prescription pills", "relapse_risk": 0.4, "relapses": 1}],
        "flags": {"gritty": True},
    },
}


def load_scenario(name: str = "standard") -> dict:
    """
    Build fresh state stores for a preset.
    Returns {game_state, psych, narrative, flags} or {"error": ...}.
    """
    preset = SCENARIOS.get(name)
    if preset is None:
        return {"error": f"Unknown scenario '{name}'. Options: {', '.join(SCENARIOS)}"}

    game_state = copy.deepcopy(preset["game_state"])
    game_state["scenario"] = name

    psych = PsychologicalState()
    for key, value in preset["psych"].items():
        setattr(psych, key, value)

    narrative = NarrativeState()
    for fid in FACTION_IDS:
        narrative.faction_standings[fid] = preset["standings"].get(fid, 0)
    for arc in preset["arcs"]:
        narrative.ongoing_storylines.append(ArcInstance(**arc))

    return {
        "game_state": game_state,
        "psych": psych,
        "narrative": narrative,
        "flags": dict(preset["flags"]),
    }
