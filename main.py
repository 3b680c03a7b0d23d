"""
GigMaster Narrative Engine v1.0 - Main Entry Point
Headless week simulator. Runs the session for N weeks, resolving each
event with a random available choice, and prints what happened.

Usage:
    python main.py                      # Run 1 week
    python main.py 12                   # Run 12 weeks
    python main.py 12 --seed 7          # Reproducible run
    python main.py --scenario gritty    # Start from a preset
    python main.py --status             # Show current state
    python main.py --save               # Save state after the run
"""

import random
import sys

import config
from dice import pick_one
from factions import get_faction_status
from game_loop import GameSession
from scenarios import SCENARIOS


def show_status(session: GameSession):
    """Print current session status."""
    gs = session.game_state
    psych = session.psych
    print(f"\n{'═'*60}")
    print(f"  GIGMASTER NARRATIVE ENGINE v1.0 - {gs.get('band_name', '?').upper()}")
    print(f"{'═'*60}")
    print(f"  Week: {gs.get('week', 0)}   Scenario: {gs.get('scenario', '?')}")
    print(f"  Fame: {gs.get('fame', 0)}   Money: {gs.get('money', 0)}")
    venue = gs.get("current_venue") or {}
    print(f"  Venue: {venue.get('name', '-')} ({venue.get('type', '-')})")
    print(f"{'─'*60}")

    print(f"\n  PSYCHOLOGY:")
    for name, value in psych.metrics().items():
        bar_len = 20
        filled = int(value / 100 * bar_len)
        bar = "█" * filled + "░" * (bar_len - filled)
        print(f"  {name:<16} [{bar}] {value:.0f}")
    if psych.trauma_history:
        print(f"  Trauma records: {len(psych.trauma_history)} "
              f"(latest: {psych.trauma_history[-1]['description']})")

    print(f"\n  FACTIONS:")
    for fid, standing in session.narrative.faction_standings.items():
        print(f"  {fid:<20} {standing:+4.0f}  {get_faction_status(standing)}")

    arcs = session.narrative.ongoing_storylines
    print(f"\n  STORYLINES ({len(arcs)}):")
    for arc in arcs:
        extra = ""
        if arc.type == "addiction_spiral":
            extra = f"  clean {arc.weeks_clean}w, relapse risk {arc.relapse_risk:.0%}"
        elif arc.type == "corruption_path":
            extra = f"  deals {len(arc.deals_made)}"
        print(f"  ▸ {arc.type}: {arc.stage} (since week {arc.start_week}){extra}")

    archetype = session.narrative.player_archetype
    if archetype.get("detected"):
        print(f"\n  ARCHETYPE: {archetype['primary']} / {archetype.get('secondary') or '-'}")

    print(f"\n{'═'*60}")


def _arg_value(args: list, flag: str, default=None):
    if flag in args:
        index = args.index(flag)
        if index + 1 < len(args):
            return args[index + 1]
    return default


def main():
    args = sys.argv[1:]
    config.setup_logging()

    seed = _arg_value(args, "--seed")
    rng = random.Random(int(seed)) if seed is not None else random.Random()
    session = GameSession(rng=rng, data_dir=config.DATA_DIR)

    scenario = _arg_value(args, "--scenario")
    if scenario:
        if scenario not in SCENARIOS:
            print(f"Unknown scenario '{scenario}'. Options: {', '.join(SCENARIOS)}")
            return
        session.new_game(scenario)
    else:
        session.init(config.DATA_DIR)

    if "--status" in args:
        show_status(session)
        return

    # Determine number of weeks
    weeks = 1
    for arg in args:
        if arg in (seed, scenario):
            continue
        try:
            weeks = int(arg)
            break
        except ValueError:
            pass

    print(f"\n{'═'*60}")
    print(f"  GIGMASTER - {weeks} WEEK(S) FROM WEEK {session.week}")
    print(f"{'═'*60}")

    for _ in range(weeks):
        result = session.advance_week({"post_gig": True})
        print(f"\n  ── Week {result['week']} (event chance {result['event_chance']:.0%}) ──")
        for arc_id in result["arcs_started"]:
            print(f"  📖 New storyline: {arc_id}")

        for event in list(session.pending_events):
            print(f"  ⚡ {event.title} [{event.category}/{event.maturity_level}]"
                  + (f" arc {event.arc_id}@{event.arc_stage}" if event.arc_id else ""))
            print(f"     {event.description}")
            if not event.choices:
                session.pending_events.remove(event)
                continue
            choice = pick_one(event.choices, rng)
            resolved = session.resolve_choice(event.id, choice.id)
            if not resolved.get("success"):
                print(f"     ✗ {resolved.get('error')}")
                continue
            print(f"     → {choice.text}")
            trauma = resolved["consequences"].get("trauma")
            if trauma:
                print(f"     💔 Trauma: {trauma['description']} ({trauma['severity']})")

    show_status(session)

    if "--save" in args:
        filename = session.save_game()
        print(f"  State saved to {session.data_dir}/{filename}")


if __name__ == "__main__":
    main()
