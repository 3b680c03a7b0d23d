from models import PsychologicalState, Choice
from psychology import (update_psychological_state, add_trauma, add_coping_mechanism,
                        trigger_psychological_crisis, check_trauma_trigger, apply_psychological_effects,
                        split_effects, get_consequences_preview, TRAUMA_EFFECTS)
from conftest import FixedRng


def test_update_psychological_state_clamps():
    psych = PsychologicalState(addiction_risk=90)
    update_psychological_state(psych, {"addiction_risk": 50})
    assert psych.addiction_risk == 100


def test_add_trauma_records_and_applies_severity_bundle():
    psych = PsychologicalState(stress_level=0)
    trauma = add_trauma(psych, "violence", "Bottle thrown at the stage", "minor", week=3)
    assert psych.trauma_history == [trauma]
    assert trauma["week"] == 3
    assert trauma["effects"] == TRAUMA_EFFECTS["minor"]
    assert psych.stress_level == 8
    assert psych.paranoia == 5


def test_unknown_severity_uses_moderate_bundle():
    psych = PsychologicalState(stress_level=0)
    add_trauma(psych, "x", "y", "apocalyptic")
    assert psych.stress_level == TRAUMA_EFFECTS["moderate"]["stress_level"]


def test_unhealthy_coping_relieves_more_stress_but_costs():
    healthy = PsychologicalState(stress_level=50)
    unhealthy = PsychologicalState(stress_level=50)
    add_coping_mechanism(healthy, "running", "healthy")
    add_coping_mechanism(unhealthy, "drinking", "unhealthy")
    assert unhealthy.stress_level < healthy.stress_level
    assert unhealthy.paranoia > healthy.paranoia
    assert unhealthy.addiction_risk > healthy.addiction_risk
    assert healthy.coping_mechanisms[0]["mechanism"] == "running"


def test_add_coping_rejects_unknown_type():
    psych = PsychologicalState()
    assert "error" in add_coping_mechanism(psych, "yelling", "neutral")
    assert psych.coping_mechanisms == []


def test_crisis_applies_effects_then_records_severe_trauma():
    psych = PsychologicalState()
    result = trigger_psychological_crisis(psych, "breakdown", week=9)
    assert psych.stress_level == 100
    assert result["trauma"]["type"] == "psychological_breakdown"
    assert result["trauma"]["severity"] == "severe"
    assert len(psych.trauma_history) == 1


def test_split_effects_separates_factions_and_aliases():
    metrics, factions = split_effects({"stress": 10, "morality": -5, "law_enforcement": -10,
                                       "creativity": 20, "flag": True})
    assert metrics == {"stress_level": 10, "moral_integrity": -5}
    assert factions == {"law_enforcement": -10}


def test_apply_psychological_effects_maps_aliases():
    psych = PsychologicalState(stress_level=20)
    result = apply_psychological_effects(psych, {"stress": 15, "addiction": 10})
    assert result["success"]
    assert psych.stress_level == 35
    assert psych.addiction_risk == 10


def test_apply_psychological_effects_with_nothing_to_apply():
    psych = PsychologicalState()
    assert apply_psychological_effects(psych, {})["success"] is False
    assert apply_psychological_effects(psych, {"underground_scene": -10})["success"] is False


def test_check_trauma_trigger_rolls_probability():
    risk = {"type": "overdose_scare", "probability": 0.5, "severity": "critical", "description": "Close call"}
    psych = PsychologicalState()
    assert check_trauma_trigger(psych, risk, rng=FixedRng(0.7)) is None
    assert psych.trauma_history == []

    trauma = check_trauma_trigger(psych, risk, week=2, rng=FixedRng(0.1))
    assert trauma["severity"] == "critical"
    assert psych.trauma_history[0]["description"] == "Close call"
    assert check_trauma_trigger(psych, None) is None


def test_consequences_preview_shape():
    choice = Choice(id="a", text="A", immediate_effects={"money": 100},
                    long_term_effects={"long_term": {"fame": -5}}, psychological_effects={"stress": 5})
    preview = get_consequences_preview(choice)
    assert preview == {"immediate": {"money": 100}, "short_term": {}, "long_term": {"fame": -5},
                       "psychological": {"stress": 5}}
