import random

import pytest

from models import PsychologicalState
from arcs import NARRATIVE_ARCS
from catalog import (BEATS, CHARACTER_ARCHETYPES, select_character, generate_substance_event,
                     generate_corruption_event, generate_horror_event, build_beat_event,
                     generate_for_arc_stage, has_beat)
from templates import SCENARIO_TEMPLATES, TEMPLATE_TYPES, fill_pattern, generate_from_template, PLACEHOLDER_RE
from conftest import FixedRng


# ─────────────────────────────────────────────────────
# TEMPLATES
# ─────────────────────────────────────────────────────

def test_same_seed_same_template_output():
    a = generate_from_template("substance_temptation", rng=random.Random(42))
    b = generate_from_template("substance_temptation", rng=random.Random(42))
    assert a.description == b.description
    assert a.extra["pattern"] == b.extra["pattern"]


@pytest.mark.parametrize("name", list(SCENARIO_TEMPLATES))
def test_templates_leave_no_placeholders(name):
    rng = random.Random(7)
    for _ in range(25):
        event = generate_from_template(name, rng=rng)
        assert PLACEHOLDER_RE.search(event.description) is None
        assert "%" not in event.description


def test_unknown_placeholder_becomes_something():
    assert fill_pattern("Your %business_contact% calls.", {}, FixedRng(0.0)) == "Your something calls."


def test_template_metadata_and_choices():
    event = generate_from_template("substance_temptation", rng=FixedRng(0.0))
    assert event.maturity_level == "mature"
    assert event.category == "substance_abuse"
    assert [c.id for c in event.choices] == ["refuse", "try_once", "embrace"]
    offer = generate_from_template("corruption_offer", rng=FixedRng(0.0))
    assert [c.id for c in offer.choices] == ["ethical_choice", "pragmatic_choice", "corrupt_choice"]
    assert generate_from_template("no_such_family") is None
    assert set(TEMPLATE_TYPES) <= set(SCENARIO_TEMPLATES)


# ─────────────────────────────────────────────────────
# CATALOG
# ─────────────────────────────────────────────────────

def test_select_character_known_and_unknown():
    character = select_character("corrupt_cop", FixedRng(0.0))
    assert character["name"] == CHARACTER_ARCHETYPES["corrupt_cop"]["names"][0]
    assert character["archetype"] == "corrupt_cop"
    assert select_character("ghost")["name"] == "Unknown"


def test_substance_event_accepts_arc_stage():
    event = generate_substance_event("rock_bottom", PsychologicalState(addiction_risk=50), FixedRng(0.0))
    assert event.extra["tier"] == "addicted"
    assert event.extra["appeal"] == 100
    use = event.get_choice("use_substance")
    assert use.trauma_risk["severity"] == "severe"
    assert use.long_term_effects["addiction_escalation"] == 0.25
    assert event.get_choice("seek_help").long_term_effects["recovery_path"] is True


def test_corruption_event_tiers():
    event = generate_corruption_event("active_corruption", FixedRng(0.0))
    accept = event.get_choice("accept_deal")
    assert accept.immediate_effects["money"] == 100000
    assert accept.psychological_effects["moral_integrity"] == -40
    assert accept.long_term_effects["corruption_escalation"] is True
    assert generate_corruption_event("ego_inflation").extra["tier"] == "first_compromise"


def test_horror_event_can_be_limited_to_threat_types():
    for seed in range(10):
        event = generate_horror_event(random.Random(seed), ("stalker", "obsession"))
        assert event.extra["threat_type"] in ("stalker", "obsession")
        assert event.category == "psychological_horror"


def test_beats_render_game_snapshot():
    event = build_beat_event("first_hit", {"band_name": "Night Owls",
                                           "current_venue": {"name": "The Pit", "type": "club"}})
    assert "The Pit" in event.description
    assert "Night Owls" in event.description
    assert event.extra["beat"] == "first_hit"
    assert build_beat_event("not_a_beat") is None


def test_beat_choices_are_copied():
    event = build_beat_event("rock_bottom")
    event.choices[0].psychological_effects["stress"] = 999
    assert "stress" not in BEATS["rock_bottom"]["choices"][0].psychological_effects


def test_every_arc_beat_produces_an_event():
    for arc_id, arc in NARRATIVE_ARCS.items():
        for stage, beats in arc["stage_events"].items():
            for beat in beats:
                event = generate_for_arc_stage(arc_id, stage, beat, rng=random.Random(1))
                assert event is not None, f"{arc_id}/{stage}/{beat}"
                assert event.choices


def test_unauthored_stalker_beat_falls_back_to_stalker_horror():
    assert not has_beat("stalking_incident")
    event = generate_for_arc_stage("stalker_obsession", "dangerous_behavior", "stalking_incident",
                                   rng=random.Random(3))
    assert event.extra["threat_type"] in ("stalker", "obsession")
