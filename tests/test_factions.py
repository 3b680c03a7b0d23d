import pytest

from models import NarrativeState, Event, Choice
from factions import (get_faction_status, get_faction_modified_events, is_choice_available,
                      filter_available_choices, get_faction_probability_modifier,
                      update_faction_reputation, apply_faction_effects)


@pytest.mark.parametrize("standing,status", [
    (100, "ally"), (71, "ally"), (70, "friendly"), (31, "friendly"), (30, "neutral"),
    (0, "neutral"), (-29, "neutral"), (-30, "wary"), (-69, "wary"), (-70, "enemy"), (-100, "enemy"),
])
def test_status_partition(standing, status):
    assert get_faction_status(standing) == status


def _standings(**overrides):
    standings = NarrativeState().faction_standings
    standings.update(overrides)
    return standings


def _event(title="Quiet night", description="Nothing happens.", category="general"):
    return Event(id="e1", title=title, description=description, category=category,
                 choices=[Choice(id="a", text="Stay in"), Choice(id="b", text="Go out")])


def test_hated_keyword_marks_every_choice():
    event = _event(title="Drug use backstage", description="Someone is cutting lines.")
    modified = get_faction_modified_events(event, None, _standings(law_enforcement=-75))
    assert len(modified.choices) == 3
    for choice in modified.choices:
        assert choice.psychological_effects["law_enforcement"] == -10
    # original untouched
    assert event.choices[0].psychological_effects == {}


def test_hated_category_matches_too():
    event = _event(category="criminal_activity")
    modified = get_faction_modified_events(event, None, _standings())
    assert all(c.psychological_effects["law_enforcement"] == -10 for c in modified.choices)


def test_enemy_complication_added_once():
    standings = _standings(law_enforcement=-75)
    once = get_faction_modified_events(_event(), None, standings)
    twice = get_faction_modified_events(once, None, standings)
    ids = [c.id for c in twice.choices]
    assert ids.count("law_enforcement_complication") == 1
    complication = twice.get_choice("law_enforcement_complication")
    assert complication.risk_level == "high"
    assert complication.psychological_effects == {"stress": 20, "paranoia": 15}


def test_wary_faction_adds_nothing():
    modified = get_faction_modified_events(_event(), None, _standings(law_enforcement=-50))
    assert [c.id for c in modified.choices] == ["a", "b"]


def test_ally_unlocks_beneficial_choice_with_requirement():
    standings = _standings(industry_insiders=80)
    modified = get_faction_modified_events(_event(), None, standings)
    backing = modified.get_choice("industry_insiders_industry_backing")
    assert backing is not None
    assert backing.required_faction_standing == {"faction": "industry_insiders", "min_standing": 70}
    assert is_choice_available(backing, standings)

    standings["industry_insiders"] = 60
    assert not is_choice_available(backing, standings)
    assert filter_available_choices(modified, standings).get_choice(backing.id) is None


def test_choice_availability_accepts_camel_case_requirement():
    choice = Choice(id="x", text="x", required_faction_standing={"faction": "underground_scene",
                                                                 "minStanding": 40})
    assert not is_choice_available(choice, _standings(underground_scene=39))
    assert is_choice_available(choice, _standings(underground_scene=40))


def test_update_reputation_clamps_and_rejects_unknown():
    narrative = NarrativeState()
    result = update_faction_reputation(narrative, "mainstream_media", 250)
    assert result["new"] == 100
    assert result["status"] == "ally"
    update_faction_reputation(narrative, "mainstream_media", -500)
    assert narrative.faction_standings["mainstream_media"] == -100
    assert "error" in update_faction_reputation(narrative, "fan_club", 5)


def test_apply_faction_effects_skips_non_numeric():
    narrative = NarrativeState()
    results = apply_faction_effects(narrative, {"criminal_underworld": 5, "law_enforcement": -5,
                                                "underground_scene": True})
    assert len(results) == 2
    assert narrative.faction_standings["criminal_underworld"] == 5
    assert narrative.faction_standings["underground_scene"] == 0


def test_probability_modifier_bounds():
    neutral = get_faction_probability_modifier("business_opportunities", _standings())
    assert neutral == 1.0
    boosted = get_faction_probability_modifier("business_opportunities", _standings(industry_insiders=90))
    assert boosted == 1.5
    all_enemies = _standings(**{fid: -90 for fid in _standings()})
    assert 0.1 <= get_faction_probability_modifier("violence criminal_activity drug_use", all_enemies) <= 2.0
