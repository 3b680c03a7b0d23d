from models import (PsychologicalState, NarrativeState, ArcInstance, Event, Choice, EnhancedFeatures,
                    clamp, make_event_id, session_to_json, session_from_json)


def test_update_clamps_to_bounds_regardless_of_magnitude():
    psych = PsychologicalState()
    psych.update({"stress_level": 500, "moral_integrity": -1000, "paranoia": 0.5})
    assert psych.stress_level == 100
    assert psych.moral_integrity == 0
    assert psych.paranoia == 0.5

    psych.update({"stress_level": -10_000})
    assert psych.stress_level == 0
    for value in psych.metrics().values():
        assert 0 <= value <= 100


def test_update_ignores_unknown_keys_and_non_numeric_deltas():
    psych = PsychologicalState()
    result = psych.update({"courage": 10, "stress_level": "a lot", "depression": 5})
    assert sorted(result["ignored"]) == ["courage", "stress_level"]
    assert psych.stress_level == 20
    assert psych.depression == 5


def test_update_replaces_composite_fields():
    psych = PsychologicalState()
    psych.update({"trauma_history": [{"type": "x"}]})
    assert psych.trauma_history == [{"type": "x"}]


def test_clamp_custom_range():
    assert clamp(150, -100, 100) == 100
    assert clamp(-150, -100, 100) == -100


def test_narrative_views_point_at_arc_instances():
    narrative = NarrativeState()
    assert narrative.addiction_progression is None
    arc = ArcInstance(type="addiction_spiral", stage="regular_use")
    narrative.ongoing_storylines.append(arc)
    assert narrative.addiction_progression is arc
    assert narrative.corruption_progression is None
    assert set(narrative.faction_standings) == {
        "underground_scene", "industry_insiders", "mainstream_media", "law_enforcement", "criminal_underworld"}


def test_enhanced_features_from_partial_dict():
    features = EnhancedFeatures.from_dict({"enabled": 1, "content_preferences": {"violence": 1}})
    assert features.enabled is True
    assert features.maturity_level == "teen"
    assert features.allows("violence")
    assert not features.allows("sexual_content")


def test_session_json_restores_arcs_and_pending_events():
    psych = PsychologicalState(stress_level=55)
    narrative = NarrativeState()
    narrative.ongoing_storylines.append(ArcInstance(type="corruption_path", stage="active_corruption",
                                                    deals_made=[{"type": "payola", "week": 3}]))
    narrative.faction_standings["law_enforcement"] = -40
    event = Event(id="e1", title="Test", choices=[Choice(id="a", text="A",
                                                         required_faction_standing={"faction": "x",
                                                                                    "min_standing": 5})])

    loaded = session_from_json(session_to_json({"week": 4}, psych, narrative, pending_events=[event]))
    assert loaded["game_state"] == {"week": 4}
    assert loaded["psych"].stress_level == 55
    arc = loaded["narrative"].corruption_progression
    assert arc.stage == "active_corruption"
    assert arc.deals_made == [{"type": "payola", "week": 3}]
    assert loaded["narrative"].faction_standings["law_enforcement"] == -40
    restored = loaded["pending_events"][0]
    assert restored.get_choice("a").required_faction_standing["min_standing"] == 5


def test_session_json_tolerates_missing_sections():
    loaded = session_from_json("{}")
    assert loaded["psych"].moral_integrity == 100
    assert loaded["narrative"].player_archetype["detected"] is False
    assert loaded["pending_events"] == []


def test_update_never_overwrites_methods():
    psych = PsychologicalState()
    result = psych.update({"metrics": 5, "update": 1, "get": 2})
    assert sorted(result["ignored"]) == ["get", "metrics", "update"]
    assert callable(psych.metrics)
    assert psych.metrics()["stress_level"] == 20


def test_event_ids_unique_within_one_millisecond():
    ids = {make_event_id("horror") for _ in range(500)}
    assert len(ids) == 500
    assert all(i.startswith("horror_") for i in ids)


def test_session_json_keeps_choice_history():
    history = [{"id": "try_it", "text": "Try it", "risk_level": "high", "psychological_effects": {}}]
    restored = session_from_json(session_to_json({}, PsychologicalState(), NarrativeState(),
                                                 choice_history=history))
    assert restored["choice_history"] == history
    assert session_from_json("{}")["choice_history"] == []
