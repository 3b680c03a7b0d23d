import json
import os

import pytest

from game_loop import GameSession, SessionPhase
from conftest import FixedRng


@pytest.fixture
def session(tmp_path):
    s = GameSession(rng=FixedRng(0.0))
    s.init(str(tmp_path))
    return s


def test_init_without_saves_starts_standard_game(session):
    assert session.game_state["band_name"] == "The Static Hearts"
    assert session.game_state["scenario"] == "standard"
    assert session.phase == SessionPhase.IDLE
    assert session.enhanced_features["enabled"] is False


def test_new_game_rejects_unknown_scenario(session):
    result = session.new_game("moon_base")
    assert result["success"] is False
    assert "moon_base" in result["error"]
    assert session.game_state["scenario"] == "standard"


def test_new_game_scenario_and_band_name(session):
    result = session.new_game("comeback", band_name="Second Wind")
    assert result["success"] is True
    assert session.game_state["band_name"] == "Second Wind"
    assert session.narrative.addiction_progression.stage == "recovery_attempt"
    assert session.scenario_flags["gritty"] is True


# ─────────────────────────────────────────────────────
# EVENTS AND CHOICES
# ─────────────────────────────────────────────────────

def test_trigger_queues_event_and_fires_callback(session):
    seen = []
    session._on_event = seen.append
    result = session.trigger_event("first_hit")
    event = result["event"]
    assert event["title"] == "First Hit"
    assert session.phase == SessionPhase.AWAIT_CHOICE
    assert seen[0]["id"] == event["id"]
    assert session.get_full_state()["pending_events"][0]["id"] == event["id"]


def test_resolve_unknown_event_or_choice(session):
    assert session.resolve_choice("nope", "try_it")["reason"] == "not_found"
    event = session.trigger_event("first_hit")["event"]
    assert session.resolve_choice(event["id"], "nope")["reason"] == "not_found"
    assert len(session.pending_events) == 1


def test_first_hit_starts_addiction_arc(session):
    event = session.trigger_event("first_hit")["event"]
    result = session.resolve_choice(event["id"], "try_it")
    assert result["success"] is True
    assert result["consequences"]["psychological"]["updates"]["addiction_risk"] == 20
    assert session.narrative.addiction_progression.stage == "first_exposure"
    assert session.psych.addiction_risk == 40
    assert session.phase == SessionPhase.IDLE
    assert session.pending_events == []
    assert session.dialogue_history[-1]["choice_id"] == "try_it"
    assert result["archetype"]["primary"] == "risk_seeker"
    assert session.narrative.player_archetype["detected"] is True


def test_asking_for_help_advances_recovery(session):
    session.new_game("comeback")
    event = session.trigger_event("rock_bottom")["event"]
    session.resolve_choice(event["id"], "ask_for_help")
    assert session.narrative.addiction_progression.stage == "relapse_or_sobriety"
    assert session.psych.coping_mechanisms


def test_immediate_effects_touch_fame_and_money_only(session):
    event = session.trigger_event("overdose")["event"]
    money = session.game_state["money"]
    result = session.resolve_choice(event["id"], "check_into_rehab")
    assert result["consequences"]["immediate"] == {"money": -3000}
    assert session.game_state["money"] == money - 3000


# ─────────────────────────────────────────────────────
# WEEKS
# ─────────────────────────────────────────────────────

def test_weekly_event_chance(session):
    assert session.weekly_event_chance() == pytest.approx(0.38)
    session.new_game("gritty")
    assert session.weekly_event_chance() == pytest.approx(0.62)
    session.psych.stress_level = 100
    assert session.weekly_event_chance() == pytest.approx(0.8)


def test_quiet_week_ticks_clean_counter(tmp_path):
    s = GameSession(rng=FixedRng(0.99))
    s.init(str(tmp_path))
    s.new_game("comeback")
    result = s.advance_week()
    assert result["week"] == 1
    assert result["event"] is None
    assert result["clean_week"]["weeks_clean"] == 1
    assert s.narrative.addiction_progression.relapse_risk == pytest.approx(0.35)


def test_busy_week_queues_event(session):
    result = session.advance_week({"post_gig": True})
    assert result["event"] is not None
    assert session.phase == SessionPhase.AWAIT_CHOICE
    assert session.week == 1


# ─────────────────────────────────────────────────────
# PREFERENCES
# ─────────────────────────────────────────────────────

def test_set_preferences_validation(session):
    assert session.set_preferences({"maturity_level": "adult"})["success"] is False
    assert session.set_preferences({"content_preferences": {"gore": True}})["success"] is False
    assert session.enhanced_features["maturity_level"] == "teen"


def test_set_preferences_persists(session, tmp_path):
    result = session.set_preferences({"enabled": True, "maturity_level": "mature",
                                      "content_preferences": {"violence": True}})
    assert result["success"] is True
    prefs = result["enhanced_features"]["content_preferences"]
    assert prefs["violence"] is True
    assert prefs["sexual_content"] is False

    with open(os.path.join(tmp_path, "settings.json"), encoding="utf-8") as f:
        stored = json.load(f)
    assert stored["enhanced_features"]["maturity_level"] == "mature"

    fresh = GameSession()
    fresh.init(str(tmp_path))
    assert fresh.enhanced_features["enabled"] is True


# ─────────────────────────────────────────────────────
# SAVE / LOAD
# ─────────────────────────────────────────────────────

def test_save_and_load_round_trip(session):
    session.trigger_event("first_hit")
    filename = session.save_game()
    assert filename.startswith("save_The_Static_Hearts_week000_")

    session.game_state["fame"] = 999
    session.pending_events = []
    result = session.load_game(filename)
    assert result["success"] is True
    assert session.game_state["fame"] == 5
    assert len(session.pending_events) == 1
    assert session.phase == SessionPhase.AWAIT_CHOICE


def test_load_missing_file(session):
    result = session.load_game("save_nothing")
    assert result["success"] is False
    assert "File not found" in result["error"]


def test_list_saves_and_named_save(session):
    assert session.list_saves() == []
    assert session.save_game("save_custom") == "save_custom.json"
    saves = session.list_saves()
    assert [s["filename"] for s in saves] == ["save_custom.json"]


def test_init_loads_latest_save(tmp_path):
    first = GameSession()
    first.init(str(tmp_path))
    first.new_game("rising_star")
    first.save_game()

    second = GameSession()
    second.init(str(tmp_path))
    assert second.game_state["band_name"] == "Neon Undertow"
    assert second.scenario_flags["gritty"] is False
    assert second.action_log[-1]["type"] == "SESSION"


def test_same_kind_events_resolve_independently(session):
    first = session.trigger_event("the_offer")["event"]
    second = session.trigger_event("the_offer")["event"]
    assert first["id"] != second["id"]

    session.resolve_choice(first["id"], first["choices"][0]["id"])
    assert [e.id for e in session.pending_events] == [second["id"]]
    assert session.phase == SessionPhase.AWAIT_CHOICE


def test_archetype_survives_reload(session):
    for _ in range(3):
        event = session.trigger_event("first_hit")["event"]
        session.resolve_choice(event["id"], "try_it")
    assert session.narrative.player_archetype["primary"] == "risk_seeker"
    filename = session.save_game()

    reloaded = GameSession(rng=FixedRng(0.0), data_dir=session.data_dir)
    reloaded.load_game(filename)
    assert len(reloaded.choice_history) == 3
    event = reloaded.trigger_event("first_hit")["event"]
    result = reloaded.resolve_choice(event["id"], "pass")
    assert result["archetype"]["primary"] == "risk_seeker"


def test_data_dir_set_at_construction(tmp_path):
    s = GameSession(data_dir=str(tmp_path))
    assert s.data_dir == str(tmp_path)
    s.new_game("standard")
    s.save_game("save_here")
    assert os.path.exists(os.path.join(tmp_path, "save_here.json"))
