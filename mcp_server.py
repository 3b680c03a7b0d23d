"""
GigMaster Narrative Engine v1.0 - MCP Server (Thin Bridge)
An MCP client (a storytelling assistant) connects to this via stdio. It
bridges to the game server HTTP API; the session lives in the server.

Tools:
  get_session_state         - Compact summary: week, psych, factions, arcs, pending events
  trigger_event             - Generate and queue one event
  advance_week              - One in-game week passes
  resolve_choice            - Pick an option on a pending event
  set_content_preferences   - Enable/disable the content filter and its categories
"""

import sys
import os
import json
import urllib.error
import urllib.request

ENGINE_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, ENGINE_DIR)

from mcp.server.fastmcp import FastMCP

import config

server = FastMCP("gigmaster-engine")

GAME_SERVER = f"http://localhost:{config.PORT}"


def _get(path: str) -> str:
    """HTTP GET to the game server. Returns response text."""
    try:
        req = urllib.request.Request(f"{GAME_SERVER}{path}")
        with urllib.request.urlopen(req, timeout=10) as resp:
            return resp.read().decode("utf-8")
    except urllib.error.HTTPError as e:
        return json.dumps({"error": e.read().decode("utf-8", errors="replace"), "status": e.code})
    except (urllib.error.URLError, OSError) as e:
        return json.dumps({"error": f"Game server unavailable: {e}"})


def _post(path: str, data: dict = None) -> str:
    """HTTP POST to the game server. Returns response text."""
    try:
        body = json.dumps(data or {}).encode("utf-8")
        req = urllib.request.Request(f"{GAME_SERVER}{path}", data=body, method="POST")
        req.add_header("Content-Type", "application/json")
        with urllib.request.urlopen(req, timeout=30) as resp:
            return resp.read().decode("utf-8")
    except urllib.error.HTTPError as e:
        return json.dumps({"error": e.read().decode("utf-8", errors="replace"), "status": e.code})
    except (urllib.error.URLError, OSError) as e:
        return json.dumps({"error": f"Game server unavailable: {e}"})


def format_event(event: dict) -> list:
    lines = [f"--- [{event['id']}] {event.get('title', '')} ---",
             f"  category={event.get('category')} maturity={event.get('maturity_level')} "
             f"risk={event.get('risk')}"]
    if event.get("arc_id"):
        lines.append(f"  arc: {event['arc_id']} / {event.get('arc_stage')}")
    if event.get("content_warnings"):
        lines.append(f"  warnings: {', '.join(event['content_warnings'])}")
    lines.append(f"  {event.get('description', '')}")
    character = event.get("character")
    if character:
        lines.append(f"  {character.get('name')}: \"{character.get('dialogue', '')}\"")
    for choice in event.get("choices", []):
        boost = f" (appeal +{choice['appeal_boost']})" if choice.get("appeal_boost") else ""
        lines.append(f"  -> {choice['id']}: {choice['text']} [{choice.get('risk_level')}]{boost}")
    return lines


# ─────────────────────────────────────────────────────
# STATE INSPECTION
# ─────────────────────────────────────────────────────

@server.tool()
def get_session_state() -> str:
    """
    Compact summary of the running session: the band, the player's
    psychological metrics, faction standings, live storylines and the
    events still waiting for a decision.
    """
    data = json.loads(_get("/api/state"))
    if "error" in data:
        return f"Error: {data['error']}"

    gs = data.get("game_state", {})
    psych = data.get("psychological_state", {})
    narrative = data.get("narrative_state", {})

    output = [f"{gs.get('band_name', '?')} - week {gs.get('week', 0)} "
              f"(fame {gs.get('fame', 0)}, money {gs.get('money', 0)})", ""]
    output.append("PSYCHOLOGY: " + ", ".join(
        f"{k}={psych.get(k, 0):.0f}" for k in
        ("stress_level", "addiction_risk", "moral_integrity", "paranoia", "depression")))
    output.append(f"  trauma records: {len(psych.get('trauma_history', []))}")

    status = narrative.get("faction_status", {})
    output.append("FACTIONS: " + ", ".join(
        f"{fid} {standing:+.0f} ({status.get(fid, '?')})"
        for fid, standing in narrative.get("faction_standings", {}).items()))

    arcs = narrative.get("ongoing_storylines", [])
    output.append("ARCS: " + (", ".join(f"{a['type']}@{a['stage']}" for a in arcs) or "none"))
    archetype = narrative.get("player_archetype", {})
    if archetype.get("detected"):
        output.append(f"ARCHETYPE: {archetype.get('primary')} / {archetype.get('secondary') or '-'}")

    pending = data.get("pending_events", [])
    output.append("")
    output.append(f"PENDING EVENTS ({len(pending)})")
    for event in pending:
        output.extend(format_event(event))
    return "\n".join(output)


# ─────────────────────────────────────────────────────
# SESSION ACTIONS
# ─────────────────────────────────────────────────────

@server.tool()
def trigger_event(event_type: str = "random", post_gig: bool = False) -> str:
    """
    Generate one event and queue it for the player.
    event_type: "random", "substance", "corruption", "horror", "template",
    or a catalog beat id such as "the_offer".
    """
    data = json.loads(_post("/api/event", {"event_type": event_type, "post_gig": post_gig}))
    if "error" in data:
        return f"Error: {data['error']}"
    event = data.get("event", {})
    retries = event.get("extra", {}).get("filter_retries", 0)
    lines = format_event(event)
    if retries:
        lines.append(f"  (regenerated {retries}x by content filter)")
    return "\n".join(lines)


@server.tool()
def advance_week() -> str:
    """Advance one in-game week: arc start checks, recovery tick, possible event."""
    data = json.loads(_post("/api/week/advance"))
    if "error" in data:
        return f"Error: {data['error']}"
    output = [f"Week {data.get('week')} (event chance {data.get('event_chance', 0):.0%})"]
    for arc_id in data.get("arcs_started", []):
        output.append(f"  New storyline: {arc_id}")
    if data.get("event"):
        output.extend(format_event(data["event"]))
    else:
        output.append("  A quiet week.")
    return "\n".join(output)


@server.tool()
def resolve_choice(event_id: str, choice_id: str) -> str:
    """Resolve a pending event with the given choice id."""
    data = json.loads(_post("/api/choice", {"event_id": event_id, "choice_id": choice_id}))
    if "error" in data or "detail" in data:
        return f"Error: {data.get('error') or data.get('detail')}"
    consequences = data.get("consequences", {})
    output = [f"Resolved {event_id} -> {choice_id}"]
    psych = consequences.get("psychological", {})
    for key, delta in psych.get("updates", {}).items():
        output.append(f"  {key} {delta:+.0f}")
    for change in consequences.get("factions", []):
        if "faction" in change:
            output.append(f"  {change['faction']}: {change['old']:+.0f} -> {change['new']:+.0f}")
    if consequences.get("trauma"):
        output.append(f"  TRAUMA: {consequences['trauma'].get('description')}")
    for hook in consequences.get("narrative", []):
        if hook.get("new_stage"):
            output.append(f"  Storyline {hook.get('arc', '')} -> {hook['new_stage']}")
    archetype = data.get("archetype")
    if archetype.get("detected"):
        output.append(f"  Player reads as: {archetype.get('primary')}")
    return "\n".join(output)


@server.tool()
def set_content_preferences(enabled: bool, maturity_level: str = "teen",
                            substance_abuse: bool = False, sexual_content: bool = False,
                            criminal_activity: bool = False, psychological_themes: bool = False,
                            violence: bool = False, explicit_language: bool = False) -> str:
    """Set the content filter. Disabled means every event is shown."""
    payload = {
        "enabled": enabled,
        "maturity_level": maturity_level,
        "content_preferences": {
            "substance_abuse": substance_abuse,
            "sexual_content": sexual_content,
            "criminal_activity": criminal_activity,
            "psychological_themes": psychological_themes,
            "violence": violence,
            "explicit_language": explicit_language,
        },
    }
    data = json.loads(_post("/api/preferences", payload))
    if "error" in data or "detail" in data:
        return f"Error: {data.get('error') or data.get('detail')}"
    features = data.get("enhanced_features", {})
    allowed = [k for k, v in features.get("content_preferences", {}).items() if v]
    return (f"Content filter {'ON' if features.get('enabled') else 'OFF'}, "
            f"maturity {features.get('maturity_level')}, allowed: {', '.join(allowed) or 'none'}")


if __name__ == "__main__":
    server.run(transport="stdio")
