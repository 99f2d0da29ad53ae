"""Pairing engine: uniformly random derangements by rejection sampling.

A roster of ``n`` distinct identifiers is shuffled (``random.shuffle`` is a
Fisher-Yates shuffle) and position ``i`` of the original order gives to
position ``i`` of the shuffled order. Any shuffle with a fixed point is thrown
away whole and the roster is shuffled again; patching a fixed point with a
local swap would bias the result away from uniform-over-derangements.

Roughly 1/e of all permutations are derangements, so with the default bound
of 100 attempts the chance of giving up is about (1 - 1/e) ** 100 ~ 1e-20
for large rosters, and 2 ** -100 for a roster of two.
"""
from __future__ import annotations

import random
from typing import Hashable, Iterable, Mapping, TypeVar

from .errors import PairingError, RosterTooSmall

T = TypeVar("T", bound=Hashable)

DEFAULT_MAX_ATTEMPTS = 100

_system_random = random.SystemRandom()


def compute_derangement(
    participants: Iterable[T],
    *,
    rng: random.Random | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> dict[T, T]:
    """Return a giver -> receiver mapping with no one giving to themself.

    Raises RosterTooSmall for fewer than two participants and PairingError if
    no derangement turns up within ``max_attempts`` full shuffles.
    """
    givers = list(participants)
    if len(set(givers)) != len(givers):
        raise ValueError("Participant identifiers must be distinct.")
    if len(givers) < 2:
        raise RosterTooSmall()
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")

    rng = rng or _system_random
    receivers = givers[:]

    for _ in range(max_attempts):
        rng.shuffle(receivers)
        if all(g != r for g, r in zip(givers, receivers)):
            mapping = dict(zip(givers, receivers))
            verify_assignment_set(givers, mapping)
            return mapping

    raise PairingError(f"No valid pairing found after {max_attempts} attempts.")


def verify_assignment_set(roster: Iterable[T], mapping: Mapping[T, T]) -> None:
    """Raise PairingError unless ``mapping`` is a fixed-point-free bijection on ``roster``."""
    ids = set(roster)
    if set(mapping.keys()) != ids:
        raise PairingError("Every participant must give exactly once.")
    if set(mapping.values()) != ids:
        raise PairingError("Every participant must receive exactly once.")
    if any(giver == receiver for giver, receiver in mapping.items()):
        raise PairingError("A participant was paired with themself.")
