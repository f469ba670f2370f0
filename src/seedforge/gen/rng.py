from __future__ import annotations

import hashlib
from collections.abc import Callable, MutableSequence, Sequence
from typing import Any, TypeVar

UINT32_MASK = 0xFFFFFFFF
UINT32_RANGE = 4294967296
MULBERRY32_INCREMENT = 0x6D2B79F5

T = TypeVar("T")


def _imul(a: int, b: int) -> int:
    return (a * b) & UINT32_MASK


def derive_stream_seed(master_seed: int, stream_name: str) -> int:
    """Derive a deterministic child RNG seed from (master_seed, stream_name)."""
    digest = hashlib.sha256(f"{master_seed}:{stream_name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


class SeededRandom:
    """Mulberry32 stream over a 32-bit state.

    Every draw advances the state by exactly one step, so helpers below
    document how many draws they consume.
    """

    def __init__(self, seed: int) -> None:
        if not isinstance(seed, int):
            raise ValueError("seed must be an integer")
        self._state = seed & UINT32_MASK

    def random(self) -> float:
        self._state = (self._state + MULBERRY32_INCREMENT) & UINT32_MASK
        s = self._state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & UINT32_MASK) ^ t
        return ((t ^ (t >> 14)) & UINT32_MASK) / UINT32_RANGE

    __call__ = random

    def randint_below(self, upper: int) -> int:
        """One draw; integer in [0, upper)."""
        return draw_index(self.random, upper)

    def choice(self, options: Sequence[T]) -> T:
        """One draw."""
        return pick(self.random, options)

    def shuffle(self, items: MutableSequence[Any]) -> None:
        """len(items) - 1 draws, Fisher-Yates from the end."""
        shuffle_in_place(self.random, items)

    def getstate(self) -> int:
        return self._state

    def setstate(self, state: int) -> None:
        if not isinstance(state, int):
            raise ValueError("state must be an integer")
        self._state = state & UINT32_MASK


def create_seeded_random(seed: int) -> Callable[[], float]:
    """Return a draw function yielding floats in [0, 1) for ``seed``."""
    return SeededRandom(seed).random


def draw_index(draw: Callable[[], float], upper: int) -> int:
    if upper <= 0:
        raise ValueError("upper must be a positive integer")
    return int(draw() * upper)


def draw_between(draw: Callable[[], float], low: int, high: int) -> int:
    """Integer in [low, high] inclusive, one draw."""
    return low + draw_index(draw, high - low + 1)


def pick(draw: Callable[[], float], options: Sequence[T]) -> T:
    if not options:
        raise ValueError("cannot pick from an empty sequence")
    return options[draw_index(draw, len(options))]


def pick_weighted(draw: Callable[[], float], weights: Sequence[float]) -> int:
    """Index chosen proportionally to ``weights``, one draw."""
    total = float(sum(weights))
    if total <= 0.0:
        raise ValueError("weights must sum to a positive value")
    target = draw() * total
    cumulative = 0.0
    for index, weight in enumerate(weights):
        cumulative += weight
        if target < cumulative:
            return index
    return len(weights) - 1


def shuffle_in_place(draw: Callable[[], float], items: MutableSequence[Any]) -> None:
    for index in range(len(items) - 1, 0, -1):
        swap_index = draw_index(draw, index + 1)
        items[index], items[swap_index] = items[swap_index], items[index]
