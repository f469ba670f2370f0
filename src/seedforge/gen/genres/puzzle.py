"""Logic puzzle sets: grid fill, grouping and sequence.

Draw order per puzzle (after the kind draw):

- grid_fill: row swap in the top band, row swap in the bottom band, column
  swap in the left band, column swap in the right band, digit relabel
  shuffle (3 draws), then one hide roll per cell
- grouping: category shuffle, word shuffle, one reveal roll per group label
- sequence: rule, rule parameters, length, then one hide roll per value from
  the third on
"""

from __future__ import annotations

from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_index, pick, shuffle_in_place
from seedforge.gen.spec import WorldConfig

PUZZLE_KINDS = ("grid_fill", "grouping", "sequence")
PACE_PUZZLE_COUNTS = {"fast": 3, "medium": 4, "slow": 5}
DIFFICULTY_HIDE_RATES = {"relaxed": 0.35, "steady": 0.45, "hardcore": 0.6, "rollercoaster": 0.5}
SKILL_HIDE_NUDGES = {"pure_skill": 0.05, "skill_heavy": 0.02, "balanced": 0.0, "luck_heavy": -0.05}
TIME_LIMITS = {"grid_fill": 120, "grouping": 180, "sequence": 60}

GRID_SIZE = 4
BLOCK_SIZE = 2
BASE_GRID = (
    (1, 2, 3, 4),
    (3, 4, 1, 2),
    (2, 1, 4, 3),
    (4, 3, 2, 1),
)

WORD_BANK: tuple[tuple[str, tuple[str, str, str, str]], ...] = (
    ("Fruit", ("apple", "banana", "orange", "grape")),
    ("Colours", ("red", "blue", "green", "yellow")),
    ("Instruments", ("piano", "guitar", "drum", "violin")),
    ("Seasons", ("spring", "summer", "autumn", "winter")),
    ("Planets", ("mars", "venus", "saturn", "jupiter")),
    ("Metals", ("iron", "copper", "silver", "gold")),
    ("Trees", ("oak", "birch", "maple", "willow")),
    ("Birds", ("robin", "crow", "heron", "swift")),
)
GROUP_COUNT = 4

SEQUENCE_RULES = ("arithmetic", "geometric", "fibonacci", "squares")


def hide_rate(difficulty: str, skill_luck: str) -> float:
    return DIFFICULTY_HIDE_RATES[difficulty] + SKILL_HIDE_NUDGES[skill_luck]


def build_grid_fill(draw: Draw, rate: float) -> dict[str, Any]:
    rows = [list(row) for row in BASE_GRID]
    if draw() > 0.5:
        rows[0], rows[1] = rows[1], rows[0]
    if draw() > 0.5:
        rows[2], rows[3] = rows[3], rows[2]
    if draw() > 0.5:
        for row in rows:
            row[0], row[1] = row[1], row[0]
    if draw() > 0.5:
        for row in rows:
            row[2], row[3] = row[3], row[2]
    labels = [1, 2, 3, 4]
    shuffle_in_place(draw, labels)
    solution = [[labels[value - 1] for value in row] for row in rows]

    grid: list[list[int | None]] = [
        [None if draw() < rate else value for value in row] for row in solution
    ]
    if all(value is not None for row in grid for value in row):
        grid[0][0] = None
    return {
        "kind": "grid_fill",
        "size": GRID_SIZE,
        "grid": grid,
        "solution": solution,
        "clues": ["Fill 1-4 in each row, column and 2x2 block"],
    }


def build_grouping(draw: Draw, rate: float) -> dict[str, Any]:
    categories = list(WORD_BANK)
    shuffle_in_place(draw, categories)
    chosen = categories[:GROUP_COUNT]
    words = [word for _, group in chosen for word in group]
    shuffle_in_place(draw, words)
    labels = [name if draw() >= rate else None for name, _ in chosen]
    return {
        "kind": "grouping",
        "size": GROUP_COUNT,
        "grid": [words],
        "solution": [list(group) for _, group in chosen],
        "clues": labels,
        "categories": [name for name, _ in chosen],
    }


def sequence_values(rule: str, params: dict[str, int], length: int) -> list[int]:
    if rule == "arithmetic":
        return [params["start"] + params["step"] * index for index in range(length)]
    if rule == "geometric":
        return [params["start"] * params["ratio"] ** index for index in range(length)]
    if rule == "fibonacci":
        values = [params["first"], params["second"]]
        while len(values) < length:
            values.append(values[-1] + values[-2])
        return values[:length]
    if rule == "squares":
        return [(params["offset"] + index) ** 2 for index in range(length)]
    raise ValueError(f"unknown sequence rule: {rule}")


def _sequence_params(draw: Draw, rule: str) -> dict[str, int]:
    if rule == "arithmetic":
        return {"start": 1 + draw_index(draw, 9), "step": 2 + draw_index(draw, 5)}
    if rule == "geometric":
        return {"start": 1 + draw_index(draw, 3), "ratio": 2 + draw_index(draw, 2)}
    if rule == "fibonacci":
        first = 1 + draw_index(draw, 3)
        return {"first": first, "second": first + draw_index(draw, 3)}
    return {"offset": 1 + draw_index(draw, 3)}


def _sequence_clue(rule: str, params: dict[str, int]) -> str:
    if rule == "arithmetic":
        return f"Rule: +{params['step']}"
    if rule == "geometric":
        return f"Rule: x{params['ratio']}"
    if rule == "fibonacci":
        return "Each value is the sum of the two before it"
    return "Perfect squares"


def build_sequence(draw: Draw, rate: float) -> dict[str, Any]:
    rule = pick(draw, SEQUENCE_RULES)
    params = _sequence_params(draw, rule)
    length = 6 + draw_index(draw, 2)
    solution = sequence_values(rule, params, length)
    row: list[int | None] = list(solution[:2])
    row.extend(None if draw() < rate else value for value in solution[2:])
    if all(value is not None for value in row):
        row[-1] = None
    return {
        "kind": "sequence",
        "size": length,
        "grid": [row],
        "solution": [solution],
        "clues": [_sequence_clue(rule, params)],
        "rule": rule,
        "params": params,
    }


BUILDERS = {
    "grid_fill": build_grid_fill,
    "grouping": build_grouping,
    "sequence": build_sequence,
}


def _is_latin_with_blocks(solution: list[list[int]]) -> bool:
    expected = set(range(1, GRID_SIZE + 1))
    if len(solution) != GRID_SIZE or any(len(row) != GRID_SIZE for row in solution):
        return False
    for index in range(GRID_SIZE):
        if set(solution[index]) != expected:
            return False
        if {row[index] for row in solution} != expected:
            return False
    for top in range(0, GRID_SIZE, BLOCK_SIZE):
        for left in range(0, GRID_SIZE, BLOCK_SIZE):
            block = {
                solution[top + dy][left + dx] for dy in range(BLOCK_SIZE) for dx in range(BLOCK_SIZE)
            }
            if block != expected:
                return False
    return True


def _grid_matches(grid: list[list[Any]], solution: list[list[Any]]) -> bool:
    if len(grid) != len(solution):
        return False
    for grid_row, solution_row in zip(grid, solution):
        if len(grid_row) != len(solution_row):
            return False
        if any(value is not None and value != expected for value, expected in zip(grid_row, solution_row)):
            return False
    return True


def verify_puzzle(puzzle: dict[str, Any]) -> bool:
    """True when the stored solution fits the visible grid and the kind's rule."""
    kind = puzzle.get("kind")
    solution = puzzle.get("solution")
    grid = puzzle.get("grid")
    if not isinstance(solution, list) or not isinstance(grid, list):
        return False
    if kind == "grid_fill":
        return _is_latin_with_blocks(solution) and _grid_matches(grid, solution)
    if kind == "grouping":
        words = [word for group in solution for word in group]
        if len(solution) != GROUP_COUNT or any(len(group) != GROUP_COUNT for group in solution):
            return False
        if len(set(words)) != len(words):
            return False
        return len(grid) == 1 and sorted(grid[0]) == sorted(words)
    if kind == "sequence":
        if len(solution) != 1 or len(grid) != 1:
            return False
        values = solution[0]
        row = grid[0]
        if values != sequence_values(puzzle["rule"], puzzle["params"], len(values)):
            return False
        if row[0] is None or row[1] is None or None not in row:
            return False
        return _grid_matches(grid, solution)
    return False


class PuzzleGenerator(GenreGenerator):
    genre = "puzzle_logic"
    data_key = "puzzle"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        rate = hide_rate(choices.difficulty_style, choices.skill_luck_ratio)
        puzzles: list[dict[str, Any]] = []
        for index in range(PACE_PUZZLE_COUNTS[choices.game_pace]):
            kind = pick(draw, PUZZLE_KINDS)
            puzzle = BUILDERS[kind](draw, rate)
            puzzle["id"] = f"puzzle_{index}"
            puzzle["time_limit"] = TIME_LIMITS[kind]
            puzzles.append(puzzle)
        return GenreContent(
            data={self.data_key: {"puzzles": puzzles, "current_puzzle_index": 0, "hide_rate": rate}}
        )
