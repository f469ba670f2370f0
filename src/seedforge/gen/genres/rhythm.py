"""Note charts for the rhythm genre.

Draw order:

- BPM spread, song length in beats, scroll speed spread
- per beat: gap multiplier, multi-note roll (plus a size draw when the roll
  hits), then per note: lane, hold roll (plus a length draw for holds)

Lanes already used at a timestamp are skipped by stepping to the next lane,
so a timestamp never holds two notes in one lane.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_index, pick_weighted
from seedforge.gen.spec import WorldConfig

LANE_COUNT = 4
PACE_BPM_BASE = {"fast": 150, "medium": 120, "slow": 90}
BPM_SPREAD = 30


@dataclass(frozen=True)
class DifficultyProfile:
    gap_range: tuple[float, float]
    multi_note_chance: float
    hold_chance: float
    max_simultaneous: int


DIFFICULTY_PROFILES = {
    "relaxed": DifficultyProfile((0.9, 2.0), 0.05, 0.1, 1),
    "steady": DifficultyProfile((0.6, 1.6), 0.15, 0.15, 2),
    "hardcore": DifficultyProfile((0.4, 1.0), 0.3, 0.2, 3),
    "rollercoaster": DifficultyProfile((0.5, 1.8), 0.2, 0.15, 2),
}
SCROLL_SPEED_BASE = {"pure_skill": 520, "skill_heavy": 460, "balanced": 400, "luck_heavy": 340}
SCROLL_SPEED_SPREAD = 40
HIT_WINDOW_MS = {"pure_skill": 60, "skill_heavy": 80, "balanced": 100, "luck_heavy": 130}
LANE_WEIGHTS = {
    "colors_alive": (1, 2, 2, 1),
    "sound_solid": (2, 1, 1, 2),
    "memory_touch": (1, 1, 2, 2),
    "time_uneven": (3, 1, 1, 3),
}
DEFAULT_LANE_WEIGHTS = (1, 1, 1, 1)


def _round_ms(value: float) -> int:
    return int(value + 0.5)


def generate_chart(draw: Draw, choices: ChoiceVector) -> dict[str, Any]:
    profile = DIFFICULTY_PROFILES[choices.difficulty_style]
    weights = LANE_WEIGHTS.get(choices.world_difference, DEFAULT_LANE_WEIGHTS)

    bpm = PACE_BPM_BASE[choices.game_pace] + draw_index(draw, BPM_SPREAD)
    beat_ms = 60000 / bpm
    song_beats = 60 + draw_index(draw, 40)
    song_duration = song_beats * beat_ms
    scroll_speed = SCROLL_SPEED_BASE[choices.skill_luck_ratio] + draw_index(draw, SCROLL_SPEED_SPREAD)

    gap_low, gap_high = profile.gap_range
    notes: list[dict[str, Any]] = []
    cursor = beat_ms
    for _ in range(song_beats):
        cursor += beat_ms * (gap_low + draw() * (gap_high - gap_low))
        if cursor >= song_duration - beat_ms:
            break
        note_count = 1
        if draw() < profile.multi_note_chance:
            note_count = 2 + draw_index(draw, max(1, profile.max_simultaneous - 1))
        note_count = min(note_count, profile.max_simultaneous, LANE_COUNT)
        time_ms = _round_ms(cursor)
        used_lanes: set[int] = set()
        for _note in range(note_count):
            lane = pick_weighted(draw, weights)
            while lane in used_lanes:
                lane = (lane + 1) % LANE_COUNT
            used_lanes.add(lane)
            note: dict[str, Any] = {"time": time_ms, "lane": lane, "type": "tap"}
            if draw() < profile.hold_chance:
                note["type"] = "hold"
                note["duration"] = _round_ms(beat_ms * (1 + draw() * 2))
            notes.append(note)

    notes.sort(key=lambda item: (item["time"], item["lane"]))
    return {
        "notes": notes,
        "bpm": bpm,
        "scroll_speed": scroll_speed,
        "hit_window_ms": HIT_WINDOW_MS[choices.skill_luck_ratio],
        "song_duration": _round_ms(song_duration),
        "lane_count": LANE_COUNT,
        "max_simultaneous": profile.max_simultaneous,
    }


class RhythmGenerator(GenreGenerator):
    genre = "rhythm"
    data_key = "rhythm"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        return GenreContent(data={self.data_key: generate_chart(draw, choices)})
