from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.spec import EntityDef, WorldConfig

Draw = Callable[[], float]


@dataclass(frozen=True)
class GenreContent:
    """Either layout entities (action) or a genre data payload, never both."""

    entities: tuple[EntityDef, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.entities and self.data:
            raise ValueError("genre content must carry entities or data, not both")


class GenreGenerator:
    """Genre content substrate.

    Generators are stateless; the pipeline hands each call the run's draw
    function and consumes the returned content. ``data_key`` names the
    ``genre_data`` entry a data-producing generator fills.
    """

    genre: str
    data_key: str | None = None

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        raise NotImplementedError
