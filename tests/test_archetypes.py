from models import PsychologicalState, NarrativeState, Event, Choice
from archetypes import (detect_archetype_from_choices, detect_player_archetype, adapt_event_to_archetype,
                        score_choices)


def _risky(n):
    return [{"risk_level": "extreme", "text": "Jump off the stage", "psychological_effects": {}}] * n


def test_no_history_means_no_archetype():
    assert detect_archetype_from_choices([]) is None
    assert detect_archetype_from_choices([], PsychologicalState(stress_level=95)) is None


def test_weak_evidence_stays_silent():
    history = [{"risk_level": "medium", "text": "Shrug", "psychological_effects": {}}]
    assert detect_archetype_from_choices(history, PsychologicalState(stress_level=50)) is None


def test_risky_history_detects_risk_seeker():
    profile = detect_archetype_from_choices(_risky(3), PsychologicalState(moral_integrity=40, stress_level=50))
    assert profile["id"] == "risk_seeker"


def test_higher_score_wins():
    history = [
        {"risk_level": "extreme", "text": "", "psychological_effects": {"moral_integrity": 5}},
        {"risk_level": "low", "text": "", "psychological_effects": {"moral_integrity": 5}},
    ]
    scores = score_choices(history, None)
    assert scores["risk_seeker"] == 2
    assert scores["moral_compass"] == 4
    assert detect_archetype_from_choices(history)["id"] == "moral_compass"


def test_tie_goes_to_earlier_archetype():
    tied = [
        {"risk_level": "extreme", "text": "", "psychological_effects": {}},
        {"risk_level": "high", "text": "", "psychological_effects": {}},
        {"risk_level": "low", "text": "", "psychological_effects": {"moral_integrity": 5}},
        {"risk_level": "low", "text": "", "psychological_effects": {"morality": 5}},
    ]
    scores = score_choices(tied, None)
    assert scores["risk_seeker"] == scores["moral_compass"] == 4
    assert detect_archetype_from_choices(tied)["id"] == "risk_seeker"


def test_choice_dataclasses_are_accepted():
    history = [Choice(id="x", text="Recover and adapt", risk_level="low")] * 2
    assert detect_archetype_from_choices(history)["id"] == "survivor"


def test_detect_player_archetype_writes_narrative():
    narrative = NarrativeState()
    psych = PsychologicalState(moral_integrity=90, stress_level=50)
    result = detect_player_archetype(narrative, _risky(3), psych)
    assert result is narrative.player_archetype
    assert result["primary"] == "risk_seeker"
    assert result["secondary"] == "moral_compass"
    assert result["detected"] is True
    assert result["reputation_modifiers"]["increase_risk_appeal"] is True


def test_detect_player_archetype_without_evidence():
    narrative = NarrativeState()
    result = detect_player_archetype(narrative, [])
    assert result == {"primary": None, "secondary": None, "detected": False, "reputation_modifiers": {}}


def test_adapt_event_sets_appeal_and_magnet():
    event = Event(id="e", category="substance_abuse", choices=[
        Choice(id="use", text="Use", risk_level="extreme", psychological_effects={"addiction_risk": 30}),
        Choice(id="refuse", text="Refuse", risk_level="low"),
    ])
    adapted = adapt_event_to_archetype(event, "risk_seeker")
    assert adapted.get_choice("use").appeal_boost == 20
    assert adapted.get_choice("use").psychological_effects["stress"] == -5
    assert adapted.get_choice("refuse").appeal_boost == -15
    assert adapted.archetype_boost is False

    destructive = adapt_event_to_archetype(event, "self_destructive")
    assert destructive.archetype_boost is True
    assert destructive.get_choice("use").appeal_boost == 15
    # original untouched
    assert event.get_choice("use").appeal_boost == 0


def test_adapt_with_unknown_archetype_is_noop():
    event = Event(id="e", choices=[Choice(id="a", text="A")])
    assert adapt_event_to_archetype(event, "wizard") is event
