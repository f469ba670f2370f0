from __future__ import annotations

from seedforge.gen.choices import GENRES
from seedforge.gen.genres.action import ActionGenerator
from seedforge.gen.genres.base import GenreGenerator
from seedforge.gen.genres.board import BoardGenerator
from seedforge.gen.genres.card import CardGenerator
from seedforge.gen.genres.narrative import NarrativeGenerator
from seedforge.gen.genres.puzzle import PuzzleGenerator
from seedforge.gen.genres.rhythm import RhythmGenerator

GENRE_GENERATORS: dict[str, GenreGenerator] = {
    generator.genre: generator
    for generator in (
        ActionGenerator(),
        NarrativeGenerator(),
        CardGenerator(),
        BoardGenerator(),
        PuzzleGenerator(),
        RhythmGenerator(),
    )
}

if set(GENRE_GENERATORS) != set(GENRES):
    raise RuntimeError("genre generator registry does not cover every genre")


def get_genre_generator(genre: str) -> GenreGenerator:
    if genre not in GENRE_GENERATORS:
        raise ValueError(f"no generator registered for genre: {genre}")
    return GENRE_GENERATORS[genre]
