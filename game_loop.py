"""
GigMaster Narrative Engine v1.0 - Game Session
The session owns the three state stores and the in-flight event queue.
The web server, the MCP bridge and the CLI all drive this object.

Phases:
  IDLE          -> No event waiting. Player can advance the week or trigger one.
  AWAIT_CHOICE  -> One or more events queued. Waiting for the player to pick.
"""

import copy
import glob
import logging
import os
from dataclasses import asdict
from datetime import datetime
from enum import Enum

import config
from dice import roll_chance
from models import (PsychologicalState, NarrativeState, Event, EnhancedFeatures,
                    event_to_dict, session_to_json, session_from_json)
from engine import generate_event, calculate_event_weights
from psychology import apply_psychological_effects, split_effects, check_trauma_trigger, \
    add_coping_mechanism, trigger_psychological_crisis, get_consequences_preview
from factions import apply_faction_effects, is_choice_available, get_faction_status
from arcs import (check_arc_starts, progress_arc, get_next_arc_stage, NARRATIVE_ARCS,
                  start_addiction_progression, escalate_addiction, record_clean_week, record_relapse,
                  start_corruption_path, escalate_corruption)
from archetypes import detect_player_archetype
from scenarios import load_scenario

logger = logging.getLogger("gigmaster.session")


class SessionPhase(str, Enum):
    IDLE = "idle"
    AWAIT_CHOICE = "await_choice"


class GameSession:
    """
    One play session. Each session owns independent state stores;
    never share them between sessions.
    """

    def __init__(self, rng=None, classifier=None, data_dir: str = None):
        self.game_state: dict = {}
        self.psych: PsychologicalState = PsychologicalState()
        self.narrative: NarrativeState = NarrativeState()
        self.enhanced_features: dict = copy.deepcopy(config.DEFAULT_ENHANCED_FEATURES)
        self.scenario_flags: dict = {}
        self.phase: SessionPhase = SessionPhase.IDLE

        self.pending_events: list = []          # list[Event]
        self.dialogue_history: list = []        # [{id, week, event_id, choice_id, choice_text, consequences}]
        self.choice_history: list = []          # resolved choices as dicts, for archetype detection
        self.action_log: list = []
        self.last_event: Event = None

        self.rng = rng
        self.classifier = classifier
        self._data_dir = data_dir or config.DATA_DIR
        self._used_this_week = False

        # Callbacks. The web layer registers these to push updates.
        self._on_phase_change = None
        self._on_state_update = None
        self._on_event = None
        self._on_log_entry = None

    @property
    def week(self) -> int:
        return self.game_state.get("week", 0)

    @property
    def data_dir(self) -> str:
        return self._data_dir

    # ─────────────────────────────────────────────────
    # STARTUP
    # ─────────────────────────────────────────────────

    def init(self, data_dir: str = None):
        """Load settings and the most recent save, or start a new game."""
        self._data_dir = data_dir or self._data_dir
        settings = config.load_settings(self._data_dir)
        self.enhanced_features = settings["enhanced_features"]

        for save_path in self._save_paths():
            result = self.load_game(os.path.basename(save_path))
            if result.get("success"):
                return
            self._log_action("SESSION", f"Failed to load {os.path.basename(save_path)}: "
                                        f"{result.get('error')}")
        self.new_game(settings.get("scenario", "standard"))

    def new_game(self, scenario: str = "standard", band_name: str = "") -> dict:
        preset = load_scenario(scenario)
        if "error" in preset:
            return {"success": False, "error": preset["error"]}

        self.game_state = preset["game_state"]
        if band_name:
            self.game_state["band_name"] = band_name
        self.psych = preset["psych"]
        self.narrative = preset["narrative"]
        self.scenario_flags = preset["flags"]
        self.pending_events = []
        self.dialogue_history = []
        self.choice_history = []
        self.last_event = None
        self._used_this_week = False
        self._set_phase(SessionPhase.IDLE)
        self._log_action("SESSION", f"New game: {self.game_state.get('band_name')} ({scenario})")
        self._notify_state()
        return {"success": True, "scenario": scenario, "band_name": self.game_state.get("band_name")}

    # ─────────────────────────────────────────────────
    # PHASE TRANSITIONS
    # ─────────────────────────────────────────────────

    def _set_phase(self, phase: SessionPhase):
        old = self.phase
        self.phase = phase
        if self._on_phase_change and old != phase:
            self._on_phase_change(phase, {"phase": phase.value,
                                          "pending": len(self.pending_events),
                                          "week": self.week})

    def _sync_phase(self):
        self._set_phase(SessionPhase.AWAIT_CHOICE if self.pending_events else SessionPhase.IDLE)

    def _notify_state(self):
        if self._on_state_update:
            self._on_state_update(self.get_full_state())

    # ─────────────────────────────────────────────────
    # PLAYER ACTIONS
    # ─────────────────────────────────────────────────

    def trigger_event(self, event_type: str = "random", context: dict = None) -> dict:
        """Generate one event and queue it for the player."""
        event = generate_event(
            self.game_state, self.psych, self.narrative,
            event_type=event_type, context=context,
            enhanced_features=self.enhanced_features,
            classifier=self.classifier, rng=self.rng,
        )
        self.pending_events.append(event)
        self.last_event = event
        self._log_action("EVENT", f"{event.title} [{event.category}] via {event.source or 'direct'}"
                                  + (f" arc={event.arc_id}/{event.arc_stage}" if event.arc_id else ""))
        self._sync_phase()
        payload = event_to_dict(event)
        if self._on_event:
            self._on_event(payload)
        return {"success": True, "event": payload}

    def advance_week(self, context: dict = None) -> dict:
        """
        One week passes: arc start rolls, a clean-week tick for an active
        addiction arc, then a stress-scaled chance of a new event.
        """
        self.game_state["week"] = self.week + 1
        week = self.week
        result = {"week": week, "arcs_started": [], "event": None}

        started = check_arc_starts(self.narrative, self.game_state, self.psych, week, self.rng)
        for arc_id in started:
            self._log_action("ARC", f"Started {arc_id}")
        result["arcs_started"] = started

        if self.narrative.addiction_progression is not None and not self._used_this_week:
            result["clean_week"] = record_clean_week(self.narrative, week)
        self._used_this_week = False

        chance = self.weekly_event_chance()
        result["event_chance"] = chance
        if roll_chance(chance, self.rng):
            result["event"] = self.trigger_event("random", dict(context or {}, weekly=True))["event"]

        self._log_action("WEEK", f"Week {week}: {len(started)} arcs started, "
                                 f"event={'yes' if result['event'] else 'no'}")
        self._notify_state()
        return result

    def weekly_event_chance(self) -> float:
        chance = config.WEEKLY_EVENT_BASE + (self.psych.stress_level / 100) * config.WEEKLY_EVENT_STRESS_SCALE
        if self.scenario_flags.get("gritty"):
            chance += config.WEEKLY_EVENT_GRITTY_BONUS
        return min(config.WEEKLY_EVENT_MAX, chance)

    def resolve_choice(self, event_id: str, choice_id: str) -> dict:
        """Apply the chosen option's effects and record it in history."""
        event = next((e for e in self.pending_events if e.id == event_id), None)
        if event is None:
            return {"success": False, "reason": "not_found", "error": f"No pending event '{event_id}'"}
        choice = event.get_choice(choice_id)
        if choice is None:
            return {"success": False, "reason": "not_found",
                    "error": f"Event '{event_id}' has no choice '{choice_id}'"}
        if not is_choice_available(choice, self.narrative.faction_standings):
            return {"success": False, "reason": "unavailable", "error": f"Choice '{choice_id}' is not available"}

        week = self.week
        metric_deltas, faction_deltas = split_effects(choice.psychological_effects)
        for fid, delta in (choice.faction_effects or {}).items():
            faction_deltas[fid] = faction_deltas.get(fid, 0) + delta

        consequences = {
            "psychological": apply_psychological_effects(self.psych, choice.psychological_effects),
            "factions": apply_faction_effects(self.narrative, faction_deltas),
            "immediate": self._apply_immediate(choice.immediate_effects),
            "trauma": check_trauma_trigger(self.psych, choice.trauma_risk, week, self.rng),
            "narrative": self._apply_narrative_hooks(choice.long_term_effects, event),
        }
        if metric_deltas.get("addiction_risk", 0) > 0:
            self._used_this_week = True

        self.dialogue_history.append({
            "id": f"dialogue_{len(self.dialogue_history) + 1}",
            "week": week,
            "event_id": event_id,
            "choice_id": choice_id,
            "choice_text": choice.text,
            "consequences": get_consequences_preview(choice),
            "timestamp": datetime.now().isoformat(),
        })
        self.choice_history.append(asdict(choice))
        self.choice_history = self.choice_history[-config.MAX_CHOICE_HISTORY:]
        archetype = detect_player_archetype(self.narrative, self.choice_history, self.psych)

        self.pending_events = [e for e in self.pending_events if e.id != event_id]
        self._sync_phase()
        self._log_action("CHOICE", f"{event.title}: {choice.text}")
        self._notify_state()
        return {"success": True, "event_id": event_id, "choice_id": choice_id,
                "consequences": consequences, "archetype": archetype}

    def set_preferences(self, enhanced_features: dict, persist: bool = True) -> dict:
        """Replace content preferences. Unknown preference keys are rejected."""
        features = enhanced_features or {}
        maturity = features.get("maturity_level", self.enhanced_features.get("maturity_level", "teen"))
        if maturity not in ("teen", "mature"):
            return {"success": False, "error": f"Invalid maturity level '{maturity}'"}
        prefs = features.get("content_preferences") or {}
        unknown = [k for k in prefs if k not in config.CONTENT_PREFERENCE_KEYS]
        if unknown:
            return {"success": False, "error": f"Unknown content preferences: {', '.join(unknown)}"}

        current = EnhancedFeatures.from_dict(self.enhanced_features)
        updated = EnhancedFeatures(
            enabled=bool(features.get("enabled", current.enabled)),
            maturity_level=maturity,
            content_preferences={key: bool(prefs[key]) if key in prefs else current.allows(key)
                                 for key in config.CONTENT_PREFERENCE_KEYS},
        )
        merged = asdict(updated)
        self.enhanced_features = merged

        if persist:
            settings = config.load_settings(self._data_dir)
            settings["enhanced_features"] = merged
            try:
                config.save_settings(settings, self._data_dir)
            except OSError as e:
                logger.error(f"Could not persist preferences: {e}")
        self._log_action("PREFS", f"enabled={merged['enabled']} maturity={maturity}")
        return {"success": True, "enhanced_features": merged}

    # ─────────────────────────────────────────────────
    # CHOICE SIDE EFFECTS
    # ─────────────────────────────────────────────────

    def _apply_immediate(self, effects: dict) -> dict:
        """Only fame and money live on the game snapshot; the rest is reported."""
        applied = {}
        for key in ("fame", "money"):
            delta = (effects or {}).get(key)
            if isinstance(delta, (int, float)) and not isinstance(delta, bool):
                self.game_state[key] = self.game_state.get(key, 0) + delta
                applied[key] = delta
        return applied

    def _apply_narrative_hooks(self, long_term: dict, event: Event) -> list:
        long_term = long_term or {}
        week = self.week
        results = []

        escalation = long_term.get("addiction_escalation")
        if escalation:
            probability = 1.0 if escalation is True else float(escalation)
            if roll_chance(probability, self.rng):
                if self.narrative.addiction_progression is None:
                    results.append(start_addiction_progression(
                        self.narrative, self.psych, event.extra.get("substance", ""), week))
                else:
                    results.append(escalate_addiction(self.narrative, self.psych, 1, week))
                self._used_this_week = True

        if long_term.get("corruption_escalation"):
            deal = event.extra.get("beat") or event.extra.get("tier") or event.title
            if self.narrative.corruption_progression is None:
                results.append(start_corruption_path(self.narrative, self.psych, deal, week))
            else:
                results.append(escalate_corruption(self.narrative, self.psych, deal, week))

        if long_term.get("relapse") and self.narrative.addiction_progression is not None:
            results.append(record_relapse(self.narrative, self.psych, week))

        if long_term.get("recovery_path"):
            results.append(add_coping_mechanism(self.psych, f"sought help: {event.title}", "healthy", week))

        arc_id = long_term.get("advance_arc")
        if arc_id in NARRATIVE_ARCS:
            instance = self.narrative.get_arc(arc_id)
            if instance is None:
                results.append(progress_arc(self.narrative, arc_id, NARRATIVE_ARCS[arc_id]["stages"][0], week))
            else:
                nxt = get_next_arc_stage(arc_id, instance.stage)
                if nxt:
                    results.append(progress_arc(self.narrative, arc_id, nxt, week))

        crisis = long_term.get("crisis")
        if crisis:
            results.append(trigger_psychological_crisis(self.psych, crisis, week))

        return results

    # ─────────────────────────────────────────────────
    # STATE QUERIES
    # ─────────────────────────────────────────────────

    def get_full_state(self) -> dict:
        weights = calculate_event_weights(self.psych)
        return {
            "phase": self.phase.value,
            "game_state": self.game_state,
            "psychological_state": asdict(self.psych),
            "narrative_state": {
                "ongoing_storylines": [asdict(a) for a in self.narrative.ongoing_storylines],
                "faction_standings": self.narrative.faction_standings,
                "faction_status": {fid: get_faction_status(s)
                                   for fid, s in self.narrative.faction_standings.items()},
                "player_archetype": self.narrative.player_archetype,
            },
            "event_weights": weights,
            "pending_events": [event_to_dict(e) for e in self.pending_events],
            "enhanced_features": self.enhanced_features,
            "dialogue_history": self.dialogue_history[-20:],
            "action_log": self.action_log[-50:],
        }

    # ─────────────────────────────────────────────────
    # SAVE / LOAD
    # ─────────────────────────────────────────────────

    def _save_paths(self) -> list:
        if not os.path.isdir(self._data_dir):
            return []
        return sorted(glob.glob(os.path.join(self._data_dir, "save_*.json")),
                      key=os.path.getmtime, reverse=True)

    def _canonical_save_name(self) -> str:
        band = (self.game_state.get("band_name") or "band").replace(" ", "_").replace("/", "-")
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"save_{band}_week{self.week:03d}_{stamp}.json"

    def save_game(self, filename: str = "") -> str:
        """Save current session. Returns the filename used."""
        os.makedirs(self._data_dir, exist_ok=True)
        if not filename:
            filename = self._canonical_save_name()
        if not filename.endswith(".json"):
            filename += ".json"
        filepath = os.path.join(self._data_dir, filename)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(session_to_json(self.game_state, self.psych, self.narrative,
                                    self.dialogue_history, self.pending_events,
                                    self.enhanced_features, self.choice_history))
        self._log_action("SAVE", f"Saved: {filename}")
        return filename

    def load_game(self, filename: str) -> dict:
        filepath = os.path.join(self._data_dir, filename)
        if not os.path.exists(filepath):
            if not filepath.endswith(".json"):
                filepath += ".json"
            if not os.path.exists(filepath):
                return {"success": False, "error": f"File not found: {filename}"}

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                loaded = session_from_json(f.read())
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Load failed for {filename}: {e}")
            return {"success": False, "error": str(e)}

        self.game_state = loaded["game_state"]
        self.psych = loaded["psych"]
        self.narrative = loaded["narrative"]
        self.dialogue_history = loaded["dialogue_history"]
        self.pending_events = loaded["pending_events"]
        if loaded["enhanced_features"]:
            self.enhanced_features = loaded["enhanced_features"]
        self.scenario_flags = load_scenario(self.game_state.get("scenario", "standard")).get("flags", {})
        self.choice_history = loaded["choice_history"][-config.MAX_CHOICE_HISTORY:]
        self._sync_phase()
        self._log_action("SESSION", f"Loaded: {os.path.basename(filepath)}")
        return {"success": True, "filename": os.path.basename(filepath),
                "week": self.week, "band_name": self.game_state.get("band_name")}

    def list_saves(self) -> list:
        result = []
        for s in self._save_paths():
            result.append({
                "filename": os.path.basename(s),
                "size": os.path.getsize(s),
                "modified": datetime.fromtimestamp(os.path.getmtime(s)).strftime("%Y-%m-%d %H:%M"),
            })
        return result

    # ─────────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────────

    def _log_action(self, action_type: str, detail: str):
        entry = {
            "type": action_type,
            "detail": detail,
            "timestamp": datetime.now().isoformat(),
            "week": self.week,
        }
        self.action_log.append(entry)
        logger.info(f"[{action_type}] {detail}")
        if self._on_log_entry:
            self._on_log_entry(entry)
