"""
GigMaster Narrative Engine v1.0 - FastAPI Routes
Player-facing endpoints over one GameSession, plus the WebSocket feed.
The MCP bridge talks to these same endpoints.
"""

from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from game_loop import GameSession
from web.websocket import ConnectionManager


# ─────────────────────────────────────────────────────
# APP SETUP
# ─────────────────────────────────────────────────────

app = FastAPI(title="GigMaster Narrative Engine", version="1.0")
manager = ConnectionManager()
game = GameSession()


def init_game(data_dir: str = None):
    """Initialize the session. Called from gigmaster.py."""
    game.init(data_dir)

    def on_phase_change(phase, data):
        manager.broadcast_sync("phase_change", data)

    def on_event(event):
        manager.broadcast_sync("new_event", event)

    def on_log_entry(entry):
        manager.broadcast_sync("log_entry", entry)

    game._on_phase_change = on_phase_change
    game._on_event = on_event
    game._on_log_entry = on_log_entry


async def _push_state():
    await manager.broadcast("state_update", game.get_full_state())


# ─────────────────────────────────────────────────────
# WEBSOCKET
# ─────────────────────────────────────────────────────

@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await manager.connect(ws, game.get_full_state())
    try:
        # Client messages are keepalives only
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(ws)


# ─────────────────────────────────────────────────────
# STATE
# ─────────────────────────────────────────────────────

@app.get("/api/state")
async def get_state():
    """Full session state for UI rendering."""
    return JSONResponse(game.get_full_state())


# ─────────────────────────────────────────────────────
# EVENTS & CHOICES
# ─────────────────────────────────────────────────────

class EventRequest(BaseModel):
    event_type: str = "random"
    post_gig: bool = False
    context: Optional[dict] = None


@app.post("/api/event")
async def trigger_event(req: EventRequest):
    """Generate one event and queue it."""
    context = dict(req.context or {})
    if req.post_gig:
        context["post_gig"] = True
    result = game.trigger_event(req.event_type, context)
    await _push_state()
    return JSONResponse(result)


@app.post("/api/week/advance")
async def advance_week():
    """One in-game week passes."""
    result = game.advance_week()
    await _push_state()
    return JSONResponse(result)


class ChoiceRequest(BaseModel):
    event_id: str
    choice_id: str


@app.post("/api/choice")
async def resolve_choice(req: ChoiceRequest):
    """Player picks an option on a pending event."""
    result = game.resolve_choice(req.event_id, req.choice_id)
    if not result.get("success"):
        status = 404 if result.get("reason") == "not_found" else 400
        raise HTTPException(status_code=status, detail=result.get("error"))
    await _push_state()
    return JSONResponse(result)


# ─────────────────────────────────────────────────────
# PREFERENCES
# ─────────────────────────────────────────────────────

class PreferencesRequest(BaseModel):
    enabled: bool = False
    maturity_level: str = "teen"
    content_preferences: dict[str, bool] = {}


@app.post("/api/preferences")
async def set_preferences(req: PreferencesRequest):
    """Replace content preferences and persist them to settings."""
    result = game.set_preferences(req.model_dump())
    if not result.get("success"):
        raise HTTPException(status_code=400, detail=result.get("error"))
    await _push_state()
    return JSONResponse(result)


# ─────────────────────────────────────────────────────
# SESSION LIFECYCLE
# ─────────────────────────────────────────────────────

class NewGameRequest(BaseModel):
    scenario: str = "standard"
    band_name: str = ""


@app.post("/api/new_game")
async def new_game(req: NewGameRequest):
    result = game.new_game(req.scenario, req.band_name)
    if not result.get("success"):
        raise HTTPException(status_code=400, detail=result.get("error"))
    await _push_state()
    return JSONResponse(result)


class SaveRequest(BaseModel):
    filename: str = ""


@app.post("/api/save")
async def save_game(req: Optional[SaveRequest] = None):
    """Save current session."""
    try:
        filename = game.save_game(req.filename if req else "")
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Save failed: {e}")
    return JSONResponse({"success": True, "filename": filename})


class LoadRequest(BaseModel):
    filename: str


@app.post("/api/load")
async def load_game(req: LoadRequest):
    """Load a save file."""
    result = game.load_game(req.filename)
    if not result.get("success"):
        status = 404 if "not found" in result.get("error", "") else 400
        raise HTTPException(status_code=status, detail=result.get("error"))
    await _push_state()
    return JSONResponse(result)


@app.get("/api/saves")
async def list_saves():
    """List available save files."""
    return JSONResponse({"saves": game.list_saves()})
