"""Random trace and span identifiers."""

import random

# Zero is reserved for "no id", so valid ids live in [1, UPPER_BOUND].
UPPER_BOUND = 2**63 - 1

_random = random.SystemRandom()


def generate() -> int:
    """Return a uniformly distributed id in ``[1, UPPER_BOUND]``."""
    return _random.randint(1, UPPER_BOUND)
