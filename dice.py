"""
GigMaster Narrative Engine v1.0 - Dice
Every random decision in the engine goes through these helpers so a
seeded random.Random can be injected for reproducible runs.
"""

import random


def get_rng(rng=None):
    """Return the injected generator, or the module-level one."""
    return rng if rng is not None else random


def roll_chance(probability: float, rng=None) -> bool:
    """True with the given probability (one draw)."""
    return get_rng(rng).random() < probability


def pick_one(options, rng=None):
    """Uniform pick from a sequence. None when the sequence is empty."""
    if not options:
        return None
    options = list(options)
    return options[int(get_rng(rng).random() * len(options))]


def cumulative_draw(weights: dict, rng=None, fallback: str = None) -> str:
    """
    Pick a key by cumulative probability against a single draw.
    Keys are scanned in insertion order; the last key absorbs rounding.
    """
    keys = list(weights.keys())
    if not keys:
        return fallback
    roll = get_rng(rng).random()
    cumulative = 0.0
    for key in keys:
        cumulative += weights[key]
        if roll < cumulative:
            return key
    return fallback if fallback is not None else keys[-1]
