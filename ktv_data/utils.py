from __future__ import annotations

import random
import string
from typing import Optional

AVATAR_COUNT = 14
_ALPHABET = string.ascii_letters + string.digits


def random_string(length: int = 8, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(_ALPHABET) for _ in range(length))


def random_avatar(rng: Optional[random.Random] = None) -> str:
    """Avatar token: one of the bundled avatar images, numbered from 1."""
    rng = rng or random.Random()
    return str(rng.randint(1, AVATAR_COUNT))
