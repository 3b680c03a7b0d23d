import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class FixedRng:
    """Stands in for random.Random: returns the given draws in order, repeating the last."""

    def __init__(self, *values):
        self.values = list(values) or [0.0]
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


@pytest.fixture
def fixed_rng():
    return FixedRng


@pytest.fixture
def all_blocked():
    return {
        "enabled": True,
        "maturity_level": "teen",
        "content_preferences": {
            "substance_abuse": False,
            "sexual_content": False,
            "criminal_activity": False,
            "psychological_themes": False,
            "violence": False,
            "explicit_language": False,
        },
    }
