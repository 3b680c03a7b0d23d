import pytest

from models import Event, Choice, EnhancedMeta
from enhancement import (KeywordClassifier, auto_enhancements, create_enhanced_event, enhance_choice,
                         batch_enhance_events)
from content_filter import should_show_event, filter_events_by_preferences, needs_content_warning


def _features(enabled=True, maturity="teen", **prefs):
    return {"enabled": enabled, "maturity_level": maturity, "content_preferences": prefs}


# ─────────────────────────────────────────────────────
# ENHANCEMENT
# ─────────────────────────────────────────────────────

def test_classifier_heuristics():
    classifier = KeywordClassifier()
    event = Event(id="e", title="Drug bust", description="A fight breaks out and someone gets arrested.",
                  choices=[Choice(id="a", text="Run")])
    assert classifier.detect_maturity_level(event) == "mature"
    assert classifier.categorize_event(event) == "substance_abuse"
    assert classifier.detect_content_warnings(event) == ["drug_use", "violence", "legal_trouble"]

    calm = Event(id="c", title="Soundcheck", description="The monitors hum.")
    assert classifier.detect_maturity_level(calm) == "teen"
    assert classifier.categorize_event(calm) == "general"
    assert classifier.detect_content_warnings(calm) == []


def test_author_fields_win_over_classifier():
    event = Event(id="e", title="Drug bust", category="criminal_activity", maturity_level="teen",
                  content_warnings=[])
    enhanced = create_enhanced_event(event, auto_enhancements(event))
    assert enhanced.category == "criminal_activity"
    assert enhanced.maturity_level == "teen"
    assert enhanced.content_warnings == []
    assert enhanced.enhanced.category == "criminal_activity"


def test_enhanced_event_always_has_top_level_metadata():
    raw = Event(id="e", title="Viral photo", description="A drunk photo goes viral.",
                choices=[Choice(id="a", text="Laugh it off", risk_level="low")])
    enhanced = create_enhanced_event(raw, auto_enhancements(raw))
    assert enhanced.category == "fame_scandal"
    assert enhanced.maturity_level == "mature"
    assert isinstance(enhanced.content_warnings, list)
    assert isinstance(enhanced.enhanced, EnhancedMeta)
    assert enhanced.choices[0].enhanced.risk_level == "low"
    assert raw.enhanced is None


def test_enhance_choice_defaults():
    choice = enhance_choice(Choice(id="a", text="A", risk_level=""))
    assert choice.enhanced.risk_level == "low"
    assert choice.enhanced.maturity_level == "teen"


def test_pluggable_classifier():
    class Everything:
        def detect_maturity_level(self, event):
            return "mature"

        def categorize_event(self, event):
            return "violence"

        def detect_content_warnings(self, event):
            return ["violence"]

    event = Event(id="e", title="Tea party")
    result = batch_enhance_events({"x": event}, classifier=Everything())["x"]
    assert result.category == "violence"
    assert result.content_warnings == ["violence"]


# ─────────────────────────────────────────────────────
# FILTER
# ─────────────────────────────────────────────────────

@pytest.mark.parametrize("event", [
    Event(id="a", category="substance_abuse", maturity_level="mature", content_warnings=["drug_use"]),
    Event(id="b", category="sexual_content", maturity_level="mature"),
    Event(id="c"),
])
def test_disabled_filter_shows_everything(event):
    assert should_show_event(event, _features(enabled=False))
    assert should_show_event(event, {})
    assert should_show_event(event, None)


def test_psychological_horror_exempt_from_teen_gate():
    event = Event(id="h", category="psychological_horror", maturity_level="mature", content_warnings=[])
    assert should_show_event(event, _features(psychological_themes=True))
    assert not should_show_event(event, _features(psychological_themes=False))


def test_mature_blocked_in_teen_mode():
    event = Event(id="m", category="general", maturity_level="mature", content_warnings=[])
    assert not should_show_event(event, _features())
    assert should_show_event(event, _features(maturity="mature"))


def test_category_and_warning_preferences():
    corruption = Event(id="c", category="corruption", maturity_level="teen", content_warnings=[])
    assert not should_show_event(corruption, _features(maturity="mature"))
    assert should_show_event(corruption, _features(maturity="mature", criminal_activity=True))

    brawl = Event(id="b", category="general", maturity_level="teen", content_warnings=["violence"])
    assert not should_show_event(brawl, _features(maturity="mature"))
    assert should_show_event(brawl, _features(maturity="mature", violence=True))


def test_filter_list_and_warning_flag():
    events = [Event(id="ok", category="general", maturity_level="teen", content_warnings=[]),
              Event(id="no", category="substance_abuse", maturity_level="teen", content_warnings=[])]
    assert [e.id for e in filter_events_by_preferences(events, _features())] == ["ok"]

    assert not needs_content_warning(events[1], _features(enabled=False))
    assert needs_content_warning(Event(id="m", maturity_level="mature", content_warnings=[]), _features())
    assert needs_content_warning(Event(id="w", maturity_level="teen", content_warnings=["violence"]),
                                 _features(maturity="mature"))
