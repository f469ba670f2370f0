"""Time-driven chaos runtime for one play session.

The host advances the session clock with ``advance_to``. Triggers fire every
tier frequency; each finite-duration activation schedules a revert event on
the session queue. Events due at the same time run in scheduling order and
before a trigger due at that time.
"""

from __future__ import annotations

import copy
import logging
import random
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from seedforge.chaos.engine import ChaosEngine, Tier
from seedforge.chaos.mutations import (
    ActiveMutation,
    ActiveMutationSet,
    MutationDef,
    MutationRegistry,
    SessionState,
)
from seedforge.gen.rng import derive_stream_seed

logger = logging.getLogger(__name__)

SELECTION_STREAM_NAME = "chaos_selection"
EFFECT_STREAM_NAME = "chaos_effects"
REVERT_EVENT_TYPE = "revert_mutation"

MutationListener = Callable[[ActiveMutation], None]


@dataclass(frozen=True)
class ChaosEvent:
    time_ms: int
    event_id: str
    event_type: str
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.time_ms, int) or self.time_ms < 0:
            raise ValueError("event time_ms must be a non-negative integer")
        if not isinstance(self.event_id, str) or not self.event_id:
            raise ValueError("event_id must be a non-empty string")

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_ms": self.time_ms,
            "event_id": self.event_id,
            "event_type": self.event_type,
            "params": copy.deepcopy(self.params),
        }


class ChaosSession:
    def __init__(
        self,
        level: int | float,
        *,
        seed: int,
        registry: MutationRegistry | None = None,
        state: SessionState | None = None,
        on_mutation_activated: MutationListener | None = None,
        on_mutation_deactivated: MutationListener | None = None,
    ) -> None:
        self.seed = seed
        self.state = state if state is not None else SessionState()
        self._selection_rng = random.Random(derive_stream_seed(seed, SELECTION_STREAM_NAME))
        self._effect_rng = random.Random(derive_stream_seed(seed, EFFECT_STREAM_NAME))
        self.engine = ChaosEngine(level, registry=registry, rng=self._selection_rng)
        self.active = ActiveMutationSet()
        self.now_ms = 0
        self.last_trigger_ms = 0
        self.trace: list[dict[str, Any]] = []
        self.max_active_observed = 0
        self._listeners_activated: list[MutationListener] = []
        self._listeners_deactivated: list[MutationListener] = []
        if on_mutation_activated is not None:
            self._listeners_activated.append(on_mutation_activated)
        if on_mutation_deactivated is not None:
            self._listeners_deactivated.append(on_mutation_deactivated)
        self._pending_events_by_ms: dict[int, list[ChaosEvent]] = defaultdict(list)
        self._event_ms_by_id: dict[str, int] = {}
        self._next_event_counter = 1
        self._closed = False

    @property
    def tier(self) -> Tier:
        return self.engine.get_tier()

    @property
    def closed(self) -> bool:
        return self._closed

    def add_activation_listener(self, listener: MutationListener) -> None:
        self._listeners_activated.append(listener)

    def add_deactivation_listener(self, listener: MutationListener) -> None:
        self._listeners_deactivated.append(listener)

    def set_level(self, level: int | float) -> None:
        """Change the chaos level and shed mutations the new tier no longer admits.

        The trigger clock restarts from the current time so a level raised
        mid-session never replays triggers that fell due while chaos was off.
        """
        self._require_open()
        self.engine.set_level(level)
        self.last_trigger_ms = max(self.last_trigger_ms, self.now_ms)
        eligible_ids = {mutation.mutation_id for mutation in self.engine.get_eligible_mutations()}
        for record in reversed(self.active.records()):
            if record.mutation_id not in eligible_ids:
                self._deactivate(record.mutation_id, reason="level_lowered")
        cap = self.tier.max_active_mutations
        while cap is not None and len(self.active) > cap:
            self._deactivate(self.active.records()[-1].mutation_id, reason="level_lowered")

    def active_ids(self) -> list[str]:
        return self.active.ids()

    def schedule_event_at(self, time_ms: int, event_type: str, params: dict[str, Any]) -> str:
        event_id = f"chaos-{self._next_event_counter:08d}"
        self._next_event_counter += 1
        event = ChaosEvent(time_ms=time_ms, event_id=event_id, event_type=event_type, params=params)
        self._pending_events_by_ms[time_ms].append(event)
        self._event_ms_by_id[event_id] = time_ms
        return event_id

    def cancel_event(self, event_id: str) -> bool:
        if event_id not in self._event_ms_by_id:
            return False
        time_ms = self._event_ms_by_id.pop(event_id)
        events = self._pending_events_by_ms[time_ms]
        self._pending_events_by_ms[time_ms] = [event for event in events if event.event_id != event_id]
        if not self._pending_events_by_ms[time_ms]:
            del self._pending_events_by_ms[time_ms]
        return True

    def pending_events(self) -> list[ChaosEvent]:
        return [
            event
            for time_ms in sorted(self._pending_events_by_ms)
            for event in self._pending_events_by_ms[time_ms]
        ]

    def advance_to(self, elapsed_ms: int) -> None:
        """Run every revert and trigger due up to ``elapsed_ms`` inclusive."""
        self._require_open()
        if not isinstance(elapsed_ms, int) or elapsed_ms < self.now_ms:
            raise ValueError(f"elapsed_ms must be an integer >= {self.now_ms}; got {elapsed_ms!r}")
        while True:
            next_event_ms = min(self._pending_events_by_ms) if self._pending_events_by_ms else None
            next_trigger_ms = self._next_trigger_ms()
            if next_event_ms is not None and next_event_ms <= elapsed_ms and (
                next_trigger_ms is None or next_event_ms <= next_trigger_ms
            ):
                self.now_ms = next_event_ms
                self._execute_events_at(next_event_ms)
                continue
            if next_trigger_ms is not None and next_trigger_ms <= elapsed_ms:
                self.now_ms = next_trigger_ms
                self.last_trigger_ms = next_trigger_ms
                self.trigger()
                continue
            break
        self.now_ms = elapsed_ms

    def trigger(self) -> ActiveMutation | None:
        """Activate one selected mutation now, or skip when capped or exhausted."""
        self._require_open()
        if not self.tier.allows_more(len(self.active)):
            self._record_skip("cap")
            return None
        mutation = self.engine.select_next_mutation(self.active.ids())
        if mutation is None:
            self._record_skip("exhausted")
            return None
        return self._activate(mutation)

    def activate(self, mutation_id: str) -> ActiveMutation | None:
        self._require_open()
        mutation = self.engine.registry.by_id().get(mutation_id)
        if mutation is None:
            raise ValueError(f"unknown mutation_id: {mutation_id}")
        if mutation not in self.engine.get_eligible_mutations():
            raise ValueError(f"mutation {mutation_id} is not eligible at chaos level {self.engine.get_level()}")
        if not self.tier.allows_more(len(self.active)):
            self._record_skip("cap", mutation_id=mutation_id)
            return None
        return self._activate(mutation)

    def deactivate(self, mutation_id: str) -> ActiveMutation:
        """Revert an active mutation early. Permanent mutations end only this way."""
        self._require_open()
        if mutation_id not in self.active:
            raise ValueError(f"mutation is not active: {mutation_id}")
        return self._deactivate(mutation_id, reason="replaced")

    def teardown(self) -> list[str]:
        """Cancel pending reverts and revert every finite-duration mutation."""
        if self._closed:
            return []
        for event in self.pending_events():
            self.cancel_event(event.event_id)
        reverted: list[str] = []
        for record in reversed(self.active.records()):
            if record.mutation.is_permanent:
                continue
            record.revert_event_id = None
            self._deactivate(record.mutation_id, reason="teardown")
            reverted.append(record.mutation_id)
        discarded = self.active.discard_all()
        for record in discarded:
            self.trace.append(
                {"time_ms": self.now_ms, "event": "discarded", "mutation_id": record.mutation_id}
            )
        self._closed = True
        logger.debug("chaos session closed at %sms; reverted=%s discarded=%s", self.now_ms, reverted, len(discarded))
        return reverted

    def _next_trigger_ms(self) -> int | None:
        frequency = self.tier.frequency_ms
        if self.engine.get_level() <= 0 or frequency is None:
            return None
        return self.last_trigger_ms + frequency

    def _execute_events_at(self, time_ms: int) -> None:
        events = self._pending_events_by_ms.pop(time_ms, None) or []
        for event in events:
            self._event_ms_by_id.pop(event.event_id, None)
            if event.event_type == REVERT_EVENT_TYPE:
                mutation_id = str(event.params["mutation_id"])
                record = self.active.get(mutation_id)
                if record is not None and record.revert_event_id == event.event_id:
                    record.revert_event_id = None
                    self._deactivate(mutation_id, reason="expired")

    def _activate(self, mutation: MutationDef) -> ActiveMutation:
        record = self.active.activate(mutation, self.state, self._effect_rng.random, now_ms=self.now_ms)
        if not mutation.is_permanent:
            record.revert_event_id = self.schedule_event_at(
                self.now_ms + mutation.duration_ms,
                REVERT_EVENT_TYPE,
                {"mutation_id": mutation.mutation_id},
            )
        self.max_active_observed = max(self.max_active_observed, len(self.active))
        self.trace.append(
            {
                "time_ms": self.now_ms,
                "event": "activated",
                "mutation_id": mutation.mutation_id,
                "category": mutation.category,
                "fields": sorted(record.diff),
            }
        )
        logger.debug("activated mutation %s at %sms", mutation.mutation_id, self.now_ms)
        for listener in self._listeners_activated:
            listener(record)
        return record

    def _deactivate(self, mutation_id: str, *, reason: str) -> ActiveMutation:
        record = self.active.get(mutation_id)
        if record is not None and record.revert_event_id is not None:
            self.cancel_event(record.revert_event_id)
            record.revert_event_id = None
        record = self.active.revert(mutation_id, self.state)
        self.trace.append(
            {"time_ms": self.now_ms, "event": "deactivated", "mutation_id": mutation_id, "reason": reason}
        )
        logger.debug("deactivated mutation %s at %sms (%s)", mutation_id, self.now_ms, reason)
        for listener in self._listeners_deactivated:
            listener(record)
        return record

    def _record_skip(self, reason: str, *, mutation_id: str | None = None) -> None:
        entry: dict[str, Any] = {"time_ms": self.now_ms, "event": "skipped", "reason": reason}
        if mutation_id is not None:
            entry["mutation_id"] = mutation_id
        self.trace.append(entry)
        logger.debug("skipped chaos trigger at %sms (%s)", self.now_ms, reason)

    def _require_open(self) -> None:
        if self._closed:
            raise ValueError("chaos session has been torn down")
