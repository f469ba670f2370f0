"""Chaos tiers and mutation scheduling parameters.

Level bands (inclusive):

    0        disabled
    1-30     every 90 s, 1 active, physics + visual
    31-60    every 60 s, 2 active, + entity
    61-90    every 30 s, 3 active, + rule
    91-100   every 15 s, unbounded, + narrative
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from seedforge.chaos.mutations import (
    DEFAULT_REGISTRY,
    ENTITY,
    NARRATIVE,
    PHYSICS,
    RULE,
    VISUAL,
    MutationDef,
    MutationRegistry,
)
from seedforge.gen.choices import clamp_chaos_level

UNBOUNDED_ACTIVE = None
REPORTED_UNBOUNDED_ACTIVE = 999


@dataclass(frozen=True)
class Tier:
    frequency_ms: int | None
    max_active_mutations: int | None
    allowed_categories: tuple[str, ...]

    @property
    def enabled(self) -> bool:
        return self.frequency_ms is not None

    def allows_more(self, active_count: int) -> bool:
        if self.max_active_mutations is UNBOUNDED_ACTIVE:
            return True
        return active_count < self.max_active_mutations


DISABLED_TIER = Tier(frequency_ms=None, max_active_mutations=0, allowed_categories=())
TIERS: tuple[tuple[int, Tier], ...] = (
    (30, Tier(frequency_ms=90_000, max_active_mutations=1, allowed_categories=(PHYSICS, VISUAL))),
    (60, Tier(frequency_ms=60_000, max_active_mutations=2, allowed_categories=(PHYSICS, VISUAL, ENTITY))),
    (90, Tier(frequency_ms=30_000, max_active_mutations=3, allowed_categories=(PHYSICS, VISUAL, ENTITY, RULE))),
    (
        100,
        Tier(
            frequency_ms=15_000,
            max_active_mutations=UNBOUNDED_ACTIVE,
            allowed_categories=(PHYSICS, VISUAL, ENTITY, RULE, NARRATIVE),
        ),
    ),
)


def get_tier(level: int | float) -> Tier:
    clamped = clamp_chaos_level(level)
    if clamped <= 0:
        return DISABLED_TIER
    for upper, tier in TIERS:
        if clamped <= upper:
            return tier
    return TIERS[-1][1]


@dataclass(frozen=True)
class ChaosConfig:
    level: int
    mutations: tuple[str, ...]
    frequency_ms: int | None
    max_active_mutations: int
    allowed_categories: tuple[str, ...]

    @property
    def enabled(self) -> bool:
        return self.level > 0 and self.frequency_ms is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "mutations": list(self.mutations),
            "frequency_ms": self.frequency_ms,
            "max_active_mutations": self.max_active_mutations,
            "allowed_categories": list(self.allowed_categories),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ChaosConfig":
        if not isinstance(payload, dict):
            raise ValueError("chaos config must be an object")
        frequency = payload.get("frequency_ms")
        return cls(
            level=int(payload["level"]),
            mutations=tuple(str(item) for item in payload.get("mutations", [])),
            frequency_ms=None if frequency is None else int(frequency),
            max_active_mutations=int(payload.get("max_active_mutations", 0)),
            allowed_categories=tuple(str(item) for item in payload.get("allowed_categories", [])),
        )


class ChaosEngine:
    """Tier lookup and mutation selection for one chaos level.

    The engine owns no clock; hosts pass elapsed time into ``should_trigger``.
    """

    def __init__(
        self,
        level: int | float,
        registry: MutationRegistry | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._rng = rng if rng is not None else random.Random()
        self._level = clamp_chaos_level(level)
        self._tier = get_tier(self._level)

    @property
    def registry(self) -> MutationRegistry:
        return self._registry

    def get_tier(self) -> Tier:
        return self._tier

    def get_level(self) -> int:
        return self._level

    def set_level(self, level: int | float) -> None:
        self._level = clamp_chaos_level(level)
        self._tier = get_tier(self._level)

    def get_eligible_mutations(self) -> list[MutationDef]:
        return self._registry.eligible(self._level, self._tier.allowed_categories)

    def get_config(self) -> ChaosConfig:
        max_active = self._tier.max_active_mutations
        return ChaosConfig(
            level=self._level,
            mutations=tuple(mutation.mutation_id for mutation in self.get_eligible_mutations()),
            frequency_ms=self._tier.frequency_ms,
            max_active_mutations=REPORTED_UNBOUNDED_ACTIVE if max_active is UNBOUNDED_ACTIVE else max_active,
            allowed_categories=self._tier.allowed_categories,
        )

    def select_next_mutation(self, active_ids: list[str] | tuple[str, ...] | set[str]) -> MutationDef | None:
        """Uniformly pick an eligible mutation that is not already active."""
        active = set(active_ids)
        candidates = [mutation for mutation in self.get_eligible_mutations() if mutation.mutation_id not in active]
        if not candidates:
            return None
        return candidates[int(self._rng.random() * len(candidates))]

    def should_trigger(self, elapsed_ms: int | float, last_trigger_ms: int | float) -> bool:
        if self._level <= 0 or self._tier.frequency_ms is None:
            return False
        return elapsed_ms - last_trigger_ms >= self._tier.frequency_ms


def build_chaos_config(level: int | float, registry: MutationRegistry | None = None) -> ChaosConfig:
    return ChaosEngine(level, registry=registry).get_config()
