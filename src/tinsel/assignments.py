"""Assignment engine: who gifts to whom.

Fisher–Yates shuffle, then an adjacent-swap pass to break fixed points.
The swap pass is a heuristic, so every candidate is checked and the whole
shuffle is redone if a guest still drew themselves.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from tinsel.errors import AssignmentError, InvalidInputError

logger = logging.getLogger("tinsel.assignments")

MAX_ATTEMPTS = 100

_system_random = random.SystemRandom()


def _shuffle(items: list[str], rng: random.Random) -> None:
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def _repair_fixed_points(original: Sequence[str], shuffled: list[str]) -> None:
    last = len(shuffled) - 1
    for i in range(len(shuffled)):
        if shuffled[i] == original[i]:
            k = i - 1 if i == last else i + 1
            shuffled[i], shuffled[k] = shuffled[k], shuffled[i]


def is_derangement(assignments: dict[str, str], guests: Sequence[str]) -> bool:
    """True if ``assignments`` is a permutation of ``guests`` with no fixed point."""
    if set(assignments) != set(guests):
        return False
    if sorted(assignments.values()) != sorted(guests):
        return False
    return all(giver != receiver for giver, receiver in assignments.items())


def generate_assignments(
    guests: Sequence[str],
    rng: random.Random | None = None,
) -> dict[str, str]:
    """Map each guest to a different guest, chosen at random.

    Pass a seeded ``random.Random`` for reproducible draws; the default
    source is the OS entropy pool.
    """
    if len(guests) < 2:
        raise InvalidInputError("At least 2 guests required")
    if len(set(guests)) != len(guests):
        raise InvalidInputError("Guest names must be unique")

    rng = rng or _system_random
    for attempt in range(1, MAX_ATTEMPTS + 1):
        shuffled = list(guests)
        _shuffle(shuffled, rng)
        _repair_fixed_points(guests, shuffled)
        assignments = dict(zip(guests, shuffled))
        if is_derangement(assignments, guests):
            return assignments
        logger.debug("Draw %d left a fixed point, reshuffling", attempt)

    raise AssignmentError(
        f"No valid assignment after {MAX_ATTEMPTS} attempts for {len(guests)} guests"
    )
