"""Random strings of ASCII letters."""

from __future__ import annotations

import random
import string

LETTERS = string.ascii_lowercase + string.ascii_uppercase

_rng = random.Random()


def rand_str(n: int) -> str:
    """Return a random string of n ASCII letters."""
    if n < 0:
        raise ValueError("length must not be negative")
    return "".join(_rng.choices(LETTERS, k=n))