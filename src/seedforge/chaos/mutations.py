"""Mutation catalog and reversible effect application.

A mutation is a list of effect records applied to a ``SessionState``.
Applying returns a ``MutationDiff`` holding the previous value of every
field written, and reverting replays that diff backwards. When two active
mutations write the same field, reverting the older one hands its previous
value to the newer record so the live value stays with the newer mutation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, fields
from typing import Any, Union

PHYSICS = "physics"
ENTITY = "entity"
VISUAL = "visual"
RULE = "rule"
NARRATIVE = "narrative"
MUTATION_CATEGORIES = (PHYSICS, ENTITY, VISUAL, RULE, NARRATIVE)

PERMANENT_DURATION = -1
GOAL_TYPES = ("score_threshold", "survive_time", "collect_all", "reach_goal")


@dataclass
class SessionState:
    """Live values the chaos layer is allowed to perturb."""

    gravity_y: float = 800.0
    friction: float = 0.3
    bounciness: float = 0.3
    enemy_behavior: str = "hostile"
    enemy_color: str = ""
    bullet_behavior: str = "normal"
    bullet_solid: bool = False
    bullet_lifetime_ms: int = 0
    collectible_trap_chance: float = 0.0
    trap_damage: int = 0
    platforms_moving: bool = False
    platform_move_speed: float = 0.0
    platform_move_range: float = 0.0
    color_invert: bool = False
    pixel_scale: int = 1
    mirror_x: bool = False
    score_multiplier: float = 1.0
    time_warp: bool = False
    time_warp_min_scale: float = 1.0
    time_warp_max_scale: float = 1.0
    time_warp_period_ms: int = 0
    size_shift: bool = False
    size_shift_min: float = 1.0
    size_shift_max: float = 1.0
    size_shift_interval_ms: int = 0
    text_monster: bool = False
    text_monster_speed: float = 0.0
    text_monster_damage: int = 0
    goal_type: str = "reach_goal"
    goal_shifted: bool = False
    narrator_chaos: bool = False
    score_display_offset: int = 0
    health_display_offset: int = 0
    fake_death_chance: float = 0.0

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    def get(self, field_name: str) -> Any:
        _require_state_field(field_name)
        return getattr(self, field_name)

    def set(self, field_name: str, value: Any) -> None:
        _require_state_field(field_name)
        setattr(self, field_name, value)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_STATE_FIELDS = frozenset(SessionState.field_names())
_STATE_DEFAULTS = SessionState().to_dict()


def _require_state_field(field_name: str) -> None:
    if field_name not in _STATE_FIELDS:
        raise ValueError(f"unknown session state field: {field_name}")


def state_field_default(field_name: str) -> Any:
    _require_state_field(field_name)
    return _STATE_DEFAULTS[field_name]


@dataclass(frozen=True)
class SetField:
    field_name: str
    value: Any

    def resolve(self, current: Any, draw: Callable[[], float]) -> Any:
        return self.value


@dataclass(frozen=True)
class NegateField:
    field_name: str

    def resolve(self, current: Any, draw: Callable[[], float]) -> Any:
        return -current


@dataclass(frozen=True)
class PickOther:
    field_name: str
    options: tuple[Any, ...]

    def resolve(self, current: Any, draw: Callable[[], float]) -> Any:
        candidates = [option for option in self.options if option != current]
        if not candidates:
            return current
        return candidates[int(draw() * len(candidates))]


@dataclass(frozen=True)
class RandomInt:
    field_name: str
    low: int
    high: int

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError("RandomInt high must be >= low")

    def resolve(self, current: Any, draw: Callable[[], float]) -> Any:
        return self.low + int(draw() * (self.high - self.low + 1))


Effect = Union[SetField, NegateField, PickOther, RandomInt]


@dataclass(frozen=True)
class MutationDef:
    mutation_id: str
    name: str
    description: str
    category: str
    min_chaos_level: int
    duration_ms: int
    effects: tuple[Effect, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.mutation_id, str) or not self.mutation_id:
            raise ValueError("mutation_id must be a non-empty string")
        if self.category not in MUTATION_CATEGORIES:
            raise ValueError(f"category must be one of {', '.join(MUTATION_CATEGORIES)}")
        if not 0 <= self.min_chaos_level <= 100:
            raise ValueError("min_chaos_level must be in [0, 100]")
        if self.duration_ms != PERMANENT_DURATION and self.duration_ms <= 0:
            raise ValueError("duration_ms must be positive or PERMANENT_DURATION")
        if not self.effects:
            raise ValueError("mutation must declare at least one effect")
        for effect in self.effects:
            _require_state_field(effect.field_name)

    @property
    def is_permanent(self) -> bool:
        return self.duration_ms == PERMANENT_DURATION


@dataclass
class FieldChange:
    field_name: str
    previous: Any
    applied: Any


MutationDiff = dict[str, FieldChange]


def apply_mutation(mutation: MutationDef, state: SessionState, draw: Callable[[], float]) -> MutationDiff:
    """Apply every effect in order and return the recorded diff.

    Draws are consumed only by ``PickOther`` and ``RandomInt`` effects, one each.
    """
    diff: MutationDiff = {}
    for effect in mutation.effects:
        current = state.get(effect.field_name)
        value = effect.resolve(current, draw)
        if effect.field_name in diff:
            diff[effect.field_name].applied = value
        else:
            diff[effect.field_name] = FieldChange(field_name=effect.field_name, previous=current, applied=value)
        state.set(effect.field_name, value)
    return diff


@dataclass
class ActiveMutation:
    mutation: MutationDef
    activated_at_ms: int
    diff: MutationDiff
    revert_event_id: str | None = None

    @property
    def mutation_id(self) -> str:
        return self.mutation.mutation_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "mutation_id": self.mutation_id,
            "activated_at_ms": self.activated_at_ms,
            "revert_event_id": self.revert_event_id,
            "fields": sorted(self.diff),
        }


class ActiveMutationSet:
    """Applied mutations in activation order."""

    def __init__(self) -> None:
        self._records: list[ActiveMutation] = []

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, mutation_id: object) -> bool:
        return any(record.mutation_id == mutation_id for record in self._records)

    def ids(self) -> list[str]:
        return [record.mutation_id for record in self._records]

    def records(self) -> list[ActiveMutation]:
        return list(self._records)

    def get(self, mutation_id: str) -> ActiveMutation | None:
        for record in self._records:
            if record.mutation_id == mutation_id:
                return record
        return None

    def activate(
        self,
        mutation: MutationDef,
        state: SessionState,
        draw: Callable[[], float],
        *,
        now_ms: int,
    ) -> ActiveMutation:
        if mutation.mutation_id in self:
            raise ValueError(f"mutation already active: {mutation.mutation_id}")
        record = ActiveMutation(
            mutation=mutation,
            activated_at_ms=now_ms,
            diff=apply_mutation(mutation, state, draw),
        )
        self._records.append(record)
        return record

    def revert(self, mutation_id: str, state: SessionState) -> ActiveMutation:
        index = next(
            (position for position, record in enumerate(self._records) if record.mutation_id == mutation_id),
            None,
        )
        if index is None:
            raise ValueError(f"mutation is not active: {mutation_id}")
        record = self._records.pop(index)
        later_records = self._records[index:]
        for field_name, change in record.diff.items():
            successor = next((later for later in later_records if field_name in later.diff), None)
            if successor is not None:
                successor.diff[field_name].previous = change.previous
            else:
                state.set(field_name, change.previous)
        return record

    def discard_all(self) -> list[ActiveMutation]:
        records = self._records
        self._records = []
        return records


@dataclass(frozen=True)
class MutationRegistry:
    mutations: tuple[MutationDef, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for mutation in self.mutations:
            if mutation.mutation_id in seen:
                raise ValueError(f"duplicate mutation_id: {mutation.mutation_id}")
            seen.add(mutation.mutation_id)

    def by_id(self) -> dict[str, MutationDef]:
        return {mutation.mutation_id: mutation for mutation in self.mutations}

    def eligible(self, level: int, categories: Iterable[str]) -> list[MutationDef]:
        allowed = set(categories)
        return [
            mutation
            for mutation in self.mutations
            if mutation.category in allowed and mutation.min_chaos_level <= level
        ]

    def merged(self, other: "MutationRegistry") -> "MutationRegistry":
        return MutationRegistry(mutations=self.mutations + other.mutations)


def _mutation(
    mutation_id: str,
    name: str,
    description: str,
    category: str,
    min_chaos_level: int,
    duration_ms: int,
    *effects: Effect,
) -> MutationDef:
    return MutationDef(
        mutation_id=mutation_id,
        name=name,
        description=description,
        category=category,
        min_chaos_level=min_chaos_level,
        duration_ms=duration_ms,
        effects=tuple(effects),
    )


BUILTIN_MUTATIONS: tuple[MutationDef, ...] = (
    _mutation(
        "gravity_flip", "Gravity Flip", "Up becomes down.",
        PHYSICS, 10, 15_000,
        NegateField("gravity_y"),
    ),
    _mutation(
        "gravity_float", "Moonwalk", "Gravity nearly disappears.",
        PHYSICS, 15, 12_000,
        SetField("gravity_y", 50.0),
    ),
    _mutation(
        "friction_ice", "Ice Age", "Every surface turns to ice.",
        PHYSICS, 10, 20_000,
        SetField("friction", 0.02),
    ),
    _mutation(
        "friction_honey", "Honey Floor", "Movement drags through syrup.",
        PHYSICS, 15, 15_000,
        SetField("friction", 0.98),
    ),
    _mutation(
        "bounce_extreme", "Superball", "Everything bounces harder than it landed.",
        PHYSICS, 20, 18_000,
        SetField("bounciness", 1.5),
    ),
    _mutation(
        "enemy_friend", "Change of Heart", "Enemies stop attacking and turn green.",
        ENTITY, 35, 20_000,
        SetField("enemy_behavior", "friendly"),
        SetField("enemy_color", "#44FF44"),
    ),
    _mutation(
        "bullet_platform", "Solid Rounds", "Bullets freeze into temporary platforms.",
        ENTITY, 40, 25_000,
        SetField("bullet_behavior", "platform"),
        SetField("bullet_solid", True),
        SetField("bullet_lifetime_ms", 5000),
    ),
    _mutation(
        "collectible_trap", "Booby Prize", "Some collectibles bite back.",
        ENTITY, 45, 20_000,
        SetField("collectible_trap_chance", 0.4),
        SetField("trap_damage", 1),
    ),
    _mutation(
        "platform_moving", "Restless Ground", "Every platform starts to drift.",
        ENTITY, 35, 20_000,
        SetField("platforms_moving", True),
        SetField("platform_move_speed", 60.0),
        SetField("platform_move_range", 80.0),
    ),
    _mutation(
        "color_invert", "Negative Space", "All colours invert.",
        VISUAL, 5, 15_000,
        SetField("color_invert", True),
    ),
    _mutation(
        "pixel_mega", "Mega Pixels", "The world renders at a chunky resolution.",
        VISUAL, 10, 12_000,
        SetField("pixel_scale", 8),
    ),
    _mutation(
        "mirror_world", "Mirror World", "The screen flips horizontally.",
        VISUAL, 15, 15_000,
        SetField("mirror_x", True),
    ),
    _mutation(
        "score_reverse", "Debt Collector", "Points now subtract.",
        RULE, 65, 15_000,
        SetField("score_multiplier", -1.0),
    ),
    _mutation(
        "time_warp", "Time Warp", "Game speed oscillates between crawl and sprint.",
        RULE, 60, 20_000,
        SetField("time_warp", True),
        SetField("time_warp_min_scale", 0.3),
        SetField("time_warp_max_scale", 2.5),
        SetField("time_warp_period_ms", 4000),
    ),
    _mutation(
        "size_shift", "Size Shift", "Entities grow and shrink at random.",
        RULE, 55, 18_000,
        SetField("size_shift", True),
        SetField("size_shift_min", 0.4),
        SetField("size_shift_max", 2.5),
        SetField("size_shift_interval_ms", 3000),
    ),
    _mutation(
        "text_monster", "Word Eater", "The interface text comes alive and hunts the player.",
        NARRATIVE, 70, 20_000,
        SetField("text_monster", True),
        SetField("text_monster_speed", 120.0),
        SetField("text_monster_damage", 1),
    ),
    _mutation(
        "goal_shift", "Moving Goalposts", "The win condition changes for good.",
        NARRATIVE, 75, PERMANENT_DURATION,
        PickOther("goal_type", GOAL_TYPES),
        SetField("goal_shifted", True),
    ),
    _mutation(
        "narrator_chaos", "Unreliable Narrator", "The HUD starts lying.",
        NARRATIVE, 80, 25_000,
        SetField("narrator_chaos", True),
        RandomInt("score_display_offset", -100, 99),
        RandomInt("health_display_offset", -1, 1),
        SetField("fake_death_chance", 0.2),
    ),
)

DEFAULT_REGISTRY = MutationRegistry(mutations=BUILTIN_MUTATIONS)
