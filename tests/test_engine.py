import random

import pytest

import engine
from models import PsychologicalState, NarrativeState, ArcInstance
from engine import (calculate_event_weights, select_event_type_by_weights, select_specific_event,
                    specific_event_candidates, generate_event)
from conftest import FixedRng


# ─────────────────────────────────────────────────────
# WEIGHTS
# ─────────────────────────────────────────────────────

def test_crisis_profile_boosts_horror_and_substance():
    psych = PsychologicalState(addiction_risk=85, stress_level=90, moral_integrity=40,
                               paranoia=30, depression=20)
    weights = calculate_event_weights(psych)
    assert weights["horror"] > 0.1
    assert weights["substance"] > 0.1
    assert weights["substance"] + weights["corruption"] + weights["horror"] == pytest.approx(1.0)
    assert weights["filters"]["mental_breakdown_risk"] is True
    assert weights["filters"]["addiction_crisis_risk"] is True
    assert weights["filters"]["max_stress_increase"] == 10


def test_calm_profile_is_uniform():
    weights = calculate_event_weights(PsychologicalState())
    assert weights["substance"] == pytest.approx(1 / 3)
    assert weights["horror"] == pytest.approx(1 / 3)
    assert "mental_breakdown_risk" not in weights["filters"]


def test_weighted_draw_order():
    weights = {"substance": 0.5, "corruption": 0.25, "horror": 0.25, "filters": {}}
    assert select_event_type_by_weights(weights, FixedRng(0.4)) == "substance"
    assert select_event_type_by_weights(weights, FixedRng(0.6)) == "corruption"
    assert select_event_type_by_weights(weights, FixedRng(0.9)) == "horror"


# ─────────────────────────────────────────────────────
# CONTEXTUAL SELECTION
# ─────────────────────────────────────────────────────

def test_venue_beats_doubled_after_gig():
    game_state = {"current_venue": {"name": "The Rusty Nail", "type": "dive_bar"}}
    normal = specific_event_candidates(game_state, None, {})
    post_gig = specific_event_candidates(game_state, None, {"post_gig": True})
    assert normal == ["dive_bar_brawl", "small_bribe"]
    assert post_gig.count("dive_bar_brawl") == 2


def test_venue_type_guessed_from_name():
    candidates = specific_event_candidates({"current_venue": {"name": "Summer Fest Main Stage"}}, None)
    assert "festival_afterparty" in candidates


def test_threshold_candidates():
    candidates = specific_event_candidates({"money": -50, "fame": 100, "has_label_deal": True},
                                           PsychologicalState(stress_level=80, depression=70))
    for beat in ("debt_collector", "label_pressure", "fan_letter", "viral_moment",
                 "burnout_warning", "therapy_start"):
        assert beat in candidates
    assert "the_contract" not in candidates


def test_select_specific_event_rolls_then_picks():
    game_state = {"current_venue": {"type": "dive_bar"}}
    assert select_specific_event("random", {"post_gig": True}, game_state, None, FixedRng(0.4, 0.0)) \
        == "dive_bar_brawl"
    assert select_specific_event("random", {}, game_state, None, FixedRng(0.4)) is None
    assert select_specific_event("random", {}, {}, PsychologicalState(), FixedRng(0.0)) is None


# ─────────────────────────────────────────────────────
# ORCHESTRATOR
# ─────────────────────────────────────────────────────

def test_active_arc_takes_precedence():
    narrative = NarrativeState()
    narrative.ongoing_storylines.append(ArcInstance(type="addiction_spiral", stage="rock_bottom"))
    for seed in range(5):
        event = generate_event({}, PsychologicalState(), narrative, rng=random.Random(seed))
        assert event.arc_id == "addiction_spiral"
        assert event.arc_stage == "rock_bottom"
        assert event.source == "arc"
        assert event.enhanced is not None


def test_blocked_arc_event_falls_through(all_blocked):
    narrative = NarrativeState()
    narrative.ongoing_storylines.append(ArcInstance(type="addiction_spiral", stage="rock_bottom"))
    event = generate_event({}, PsychologicalState(), narrative, enhanced_features=all_blocked,
                           rng=random.Random(2))
    assert event is not None
    assert event.source != "arc"


def test_regeneration_is_bounded(monkeypatch, all_blocked):
    depths = []
    original = engine.generate_event

    def counting(*args, **kwargs):
        depths.append(kwargs.get("depth", args[-1] if len(args) == 9 else 0))
        return original(*args, **kwargs)

    monkeypatch.setattr(engine, "generate_event", counting)
    event = engine.generate_event({}, PsychologicalState(), NarrativeState(),
                                  enhanced_features=all_blocked, rng=random.Random(11))
    assert event is not None
    assert event.extra["filter_retries"] == 5
    assert max(depths) == 5
    assert len(depths) == 6


def test_filter_disabled_never_regenerates():
    event = generate_event({}, PsychologicalState(), NarrativeState(), event_type="substance",
                           enhanced_features={"enabled": False}, rng=random.Random(0))
    assert event.category == "substance_abuse"
    assert event.extra["filter_retries"] == 0


def test_forced_beat_and_template():
    offer = generate_event({}, None, None, event_type="the_offer", rng=random.Random(0))
    assert offer.source == "specific"
    assert offer.extra["beat"] == "the_offer"

    template = generate_event({}, None, None, event_type="template", rng=random.Random(0))
    assert template.source == "template"
    assert "%" not in template.description


def test_unknown_category_uses_template_or_default():
    templated = generate_event({}, None, None, event_type="polka", rng=FixedRng(0.0))
    assert templated.source == "template"
    fallback = generate_event({}, None, None, event_type="polka", rng=FixedRng(0.99))
    assert fallback.source == "fallback"
    assert fallback.category == "substance_abuse"


def test_archetype_and_factions_shape_choices():
    narrative = NarrativeState()
    narrative.player_archetype = {"primary": "risk_seeker", "secondary": None, "detected": True,
                                  "reputation_modifiers": {}}
    narrative.faction_standings["criminal_underworld"] = -90
    narrative.faction_standings["mainstream_media"] = 60
    event = generate_event({}, PsychologicalState(), narrative, event_type="substance",
                           rng=random.Random(0))
    assert event.get_choice("use_substance").appeal_boost == 20
    assert event.get_choice("criminal_underworld_complication") is not None


def test_unavailable_choices_are_filtered():
    narrative = NarrativeState()
    narrative.faction_standings["underground_scene"] = 90
    event = generate_event({}, PsychologicalState(), narrative, event_type="horror", rng=random.Random(0))
    assert event.get_choice("underground_scene_underground_support") is not None
