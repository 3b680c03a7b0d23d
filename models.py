"""
GigMaster Narrative Engine v1.0 - Data Models
Core data structures for one play session: the psychological profile,
the narrative state (arcs, factions, archetype) and the events/choices
the engine hands to the UI layer.

All state is JSON-serializable for save/load. Histories are append-only.
"""

import itertools
import json
import time
from dataclasses import dataclass, field, fields, asdict
from typing import Optional
from enum import Enum


# ─────────────────────────────────────────────────────
# ENUMS
# ─────────────────────────────────────────────────────

class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


class MaturityLevel(str, Enum):
    TEEN = "teen"
    MATURE = "mature"


class FactionStatus(str, Enum):
    ALLY = "ally"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    WARY = "wary"
    ENEMY = "enemy"


PSYCH_METRICS = ("stress_level", "addiction_risk", "moral_integrity", "paranoia", "depression")

FACTION_IDS = (
    "underground_scene",
    "industry_insiders",
    "mainstream_media",
    "law_enforcement",
    "criminal_underworld",
)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ─────────────────────────────────────────────────────
# PSYCHOLOGICAL STATE
# ─────────────────────────────────────────────────────

def _default_support_network() -> dict:
    return {
        "family_contact": 100,
        "friend_relationships": 100,
        "professional_help": False,
        "mentor_figures": [],
    }


@dataclass
class PsychologicalState:
    """Five bounded metrics plus trauma/coping history."""
    stress_level: float = 20
    addiction_risk: float = 0
    moral_integrity: float = 100
    paranoia: float = 0
    depression: float = 0

    trauma_history: list = field(default_factory=list)      # [{id, type, description, severity, week, effects}]
    coping_mechanisms: list = field(default_factory=list)   # [{mechanism, type, week}]
    support_network: dict = field(default_factory=_default_support_network)

    def update(self, updates: dict) -> dict:
        """
        Apply relative deltas. Numeric fields are clamped to [0, 100];
        composite fields (histories, support network) are replaced outright.
        Keys that are not fields of the profile are ignored and reported.
        """
        applied = {}
        ignored = []
        for key, delta in (updates or {}).items():
            if key not in _PSYCH_FIELDS:
                ignored.append(key)
                continue
            current = getattr(self, key)
            if _is_number(current):
                if not _is_number(delta):
                    ignored.append(key)
                    continue
                new_value = clamp(current + delta)
                setattr(self, key, new_value)
                applied[key] = {"old": current, "new": new_value}
            else:
                setattr(self, key, delta)
                applied[key] = {"replaced": True}
        return {"applied": applied, "ignored": ignored}

    def metrics(self) -> dict:
        return {name: getattr(self, name) for name in PSYCH_METRICS}

    def get(self, key: str, default=None):
        return getattr(self, key, default)


_PSYCH_FIELDS = frozenset(f.name for f in fields(PsychologicalState))


# ─────────────────────────────────────────────────────
# NARRATIVE STATE
# ─────────────────────────────────────────────────────

@dataclass
class ArcInstance:
    """One live storyline. At most one per arc type."""
    type: str
    stage: str
    start_week: int = 0
    last_progress_week: int = 0

    # Addiction counters
    substance: str = ""
    weeks_clean: int = 0
    relapse_risk: float = 0.0
    relapses: int = 0

    # Corruption counters
    deals_made: list = field(default_factory=list)          # [{type, week}]
    crimes_committed: list = field(default_factory=list)

    notes: str = ""


def _default_standings() -> dict:
    return {fid: 0 for fid in FACTION_IDS}


def _default_archetype() -> dict:
    return {"primary": None, "secondary": None, "detected": False, "reputation_modifiers": {}}


@dataclass
class NarrativeState:
    ongoing_storylines: list = field(default_factory=list)  # list[ArcInstance]
    faction_standings: dict = field(default_factory=_default_standings)
    player_archetype: dict = field(default_factory=_default_archetype)

    def get_arc(self, arc_type: str) -> Optional[ArcInstance]:
        for arc in self.ongoing_storylines:
            if arc.type == arc_type:
                return arc
        return None

    @property
    def addiction_progression(self) -> Optional[ArcInstance]:
        return self.get_arc("addiction_spiral")

    @property
    def corruption_progression(self) -> Optional[ArcInstance]:
        return self.get_arc("corruption_path")


# ─────────────────────────────────────────────────────
# EVENTS & CHOICES
# ─────────────────────────────────────────────────────

@dataclass
class ChoiceEnhancement:
    risk_level: str = "low"
    maturity_level: str = "teen"
    psychological_effects: dict = field(default_factory=dict)
    faction_effects: dict = field(default_factory=dict)
    long_term_consequences: dict = field(default_factory=dict)
    tags: list = field(default_factory=list)


@dataclass
class Choice:
    id: str
    text: str
    risk_level: str = "medium"
    immediate_effects: dict = field(default_factory=dict)
    long_term_effects: dict = field(default_factory=dict)
    psychological_effects: dict = field(default_factory=dict)
    trauma_risk: Optional[dict] = None                       # {type, probability, severity, description}
    faction_effects: dict = field(default_factory=dict)
    required_faction_standing: Optional[dict] = None         # {faction, min_standing}
    appeal_boost: int = 0
    enhanced: Optional[ChoiceEnhancement] = None


@dataclass
class EnhancedMeta:
    maturity_level: str = "teen"
    category: str = "general"
    content_warnings: list = field(default_factory=list)
    risk_level: str = "low"
    psychological_triggers: list = field(default_factory=list)


@dataclass
class Event:
    id: str
    category: str = ""
    title: str = ""
    maturity_level: str = ""
    risk: str = "medium"
    description: str = ""
    character: Optional[dict] = None                         # {name, archetype, traits, dialogue}
    choices: list = field(default_factory=list)              # list[Choice]
    content_warnings: Optional[list] = None
    enhanced: Optional[EnhancedMeta] = None

    # Arc tagging
    arc_id: str = ""
    arc_stage: str = ""

    archetype_boost: bool = False
    source: str = ""                                         # arc, specific, procedural, template, fallback
    extra: dict = field(default_factory=dict)                # generator-specific fields (substance, threat_level...)

    def get_choice(self, choice_id: str) -> Optional[Choice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


@dataclass
class EnhancedFeatures:
    """Player content preferences. Stored as a plain dict on the session and in settings.json."""
    enabled: bool = False
    maturity_level: str = "teen"
    content_preferences: dict = field(default_factory=dict)   # {preference: bool}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EnhancedFeatures":
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            maturity_level=data.get("maturity_level", "teen"),
            content_preferences={k: bool(v) for k, v in (data.get("content_preferences") or {}).items()},
        )

    def allows(self, preference: str) -> bool:
        return bool(self.content_preferences.get(preference, False))


_event_seq = itertools.count(1)


def make_event_id(kind: str) -> str:
    """Type + millisecond timestamp + process-wide sequence number."""
    return f"{kind}_{int(time.time() * 1000)}_{next(_event_seq)}"


# ─────────────────────────────────────────────────────
# SERIALIZATION
# ─────────────────────────────────────────────────────

def event_to_dict(event: Event) -> dict:
    return asdict(event)


def choice_from_dict(data: dict) -> Choice:
    enhanced = data.get("enhanced")
    return Choice(
        id=data["id"], text=data.get("text", ""),
        risk_level=data.get("risk_level", "medium"),
        immediate_effects=data.get("immediate_effects", {}) or {},
        long_term_effects=data.get("long_term_effects", {}) or {},
        psychological_effects=data.get("psychological_effects", {}) or {},
        trauma_risk=data.get("trauma_risk"),
        faction_effects=data.get("faction_effects", {}) or {},
        required_faction_standing=data.get("required_faction_standing"),
        appeal_boost=data.get("appeal_boost", 0),
        enhanced=ChoiceEnhancement(**enhanced) if enhanced else None,
    )


def event_from_dict(data: dict) -> Event:
    enhanced = data.get("enhanced")
    return Event(
        id=data["id"],
        category=data.get("category", ""),
        title=data.get("title", ""),
        maturity_level=data.get("maturity_level", ""),
        risk=data.get("risk", "medium"),
        description=data.get("description", ""),
        character=data.get("character"),
        choices=[choice_from_dict(c) for c in data.get("choices", [])],
        content_warnings=data.get("content_warnings"),
        enhanced=EnhancedMeta(**enhanced) if enhanced else None,
        arc_id=data.get("arc_id", ""),
        arc_stage=data.get("arc_stage", ""),
        archetype_boost=data.get("archetype_boost", False),
        source=data.get("source", ""),
        extra=data.get("extra", {}),
    )


def session_to_json(game_state: dict, psych: PsychologicalState,
                    narrative: NarrativeState, dialogue_history: list = None,
                    pending_events: list = None, enhanced_features: dict = None,
                    choice_history: list = None) -> str:
    """Serialize a complete session to JSON."""
    data = {
        "game_state": game_state,
        "psychological_state": asdict(psych),
        "narrative_state": {
            "ongoing_storylines": [asdict(arc) for arc in narrative.ongoing_storylines],
            "faction_standings": narrative.faction_standings,
            "player_archetype": narrative.player_archetype,
        },
        "dialogue_history": dialogue_history or [],
        "choice_history": choice_history or [],
        "pending_events": [event_to_dict(e) for e in (pending_events or [])],
        "enhanced_features": enhanced_features,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def session_from_json(json_str: str) -> dict:
    """
    Deserialize a session. Missing sections fall back to new-game defaults.
    Returns {game_state, psych, narrative, dialogue_history, choice_history,
    pending_events, enhanced_features}.
    """
    data = json.loads(json_str)

    pdata = data.get("psychological_state", {})
    psych = PsychologicalState(
        stress_level=pdata.get("stress_level", 20),
        addiction_risk=pdata.get("addiction_risk", 0),
        moral_integrity=pdata.get("moral_integrity", 100),
        paranoia=pdata.get("paranoia", 0),
        depression=pdata.get("depression", 0),
        trauma_history=pdata.get("trauma_history", []),
        coping_mechanisms=pdata.get("coping_mechanisms", []),
        support_network=pdata.get("support_network", _default_support_network()),
    )

    ndata = data.get("narrative_state", {})
    narrative = NarrativeState()
    for adata in ndata.get("ongoing_storylines", []):
        narrative.ongoing_storylines.append(ArcInstance(
            type=adata["type"], stage=adata["stage"],
            start_week=adata.get("start_week", 0),
            last_progress_week=adata.get("last_progress_week", 0),
            substance=adata.get("substance", ""),
            weeks_clean=adata.get("weeks_clean", 0),
            relapse_risk=adata.get("relapse_risk", 0.0),
            relapses=adata.get("relapses", 0),
            deals_made=adata.get("deals_made", []),
            crimes_committed=adata.get("crimes_committed", []),
            notes=adata.get("notes", ""),
        ))
    standings = _default_standings()
    standings.update(ndata.get("faction_standings", {}))
    narrative.faction_standings = standings
    archetype = _default_archetype()
    archetype.update(ndata.get("player_archetype", {}))
    narrative.player_archetype = archetype

    return {
        "game_state": data.get("game_state", {}),
        "psych": psych,
        "narrative": narrative,
        "dialogue_history": data.get("dialogue_history", []),
        "choice_history": data.get("choice_history", []),
        "pending_events": [event_from_dict(e) for e in data.get("pending_events", [])],
        "enhanced_features": data.get("enhanced_features"),
    }
