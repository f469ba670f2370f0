from dataclasses import replace

import pytest

from seedforge.gen.choices import DIFFICULTY_STYLES, GAME_PACES, GENRE_DEFAULTS
from seedforge.gen.difficulty import build_difficulty_config, generate_difficulty_curve
from seedforge.gen.pipeline import generate
from seedforge.gen.validation import (
    has_breathing_room,
    longest_increasing_run,
    max_step_increase,
    validate_curve,
    validate_difficulty,
    validate_meaningful_play,
)


def test_relaxed_slow_curve_values() -> None:
    curve = generate_difficulty_curve("relaxed", "slow", 5)

    assert curve == pytest.approx([0.2, 0.2525, 0.305, 0.3575, 0.41])


@pytest.mark.parametrize("style", DIFFICULTY_STYLES)
@pytest.mark.parametrize("pace", GAME_PACES)
def test_curves_stay_in_unit_range(style: str, pace: str) -> None:
    curve = generate_difficulty_curve(style, pace, 12)

    assert len(curve) == 12
    assert all(0.0 <= value <= 1.0 for value in curve)


def test_curve_has_at_least_three_points() -> None:
    assert len(generate_difficulty_curve("steady", "medium", 1)) == 3


def test_unknown_curve_inputs_are_rejected() -> None:
    with pytest.raises(ValueError, match="unknown difficulty style"):
        generate_difficulty_curve("brutal", "medium")
    with pytest.raises(ValueError, match="unknown game pace"):
        generate_difficulty_curve("steady", "glacial")


def test_difficulty_config_mirrors_choices() -> None:
    config = build_difficulty_config(replace(GENRE_DEFAULTS["action"], difficulty_style="hardcore"))

    assert config.style == "hardcore"
    assert len(config.curve) == 10


def test_curve_metrics() -> None:
    assert longest_increasing_run([0.1, 0.2, 0.3, 0.2, 0.3]) == 3
    assert longest_increasing_run([0.5]) == 0
    assert max_step_increase([0.1, 0.5, 0.4]) == pytest.approx(0.4)
    assert has_breathing_room([0.1, 0.3, 0.2])
    assert not has_breathing_room([0.1, 0.2, 0.3])


def test_monotone_curve_warns_about_breathing_room() -> None:
    result = validate_curve([0.2, 0.2525, 0.305, 0.3575, 0.41])

    assert not result.valid
    assert any("breathing rooms" in warning for warning in result.warnings)


def test_curve_with_dip_is_valid() -> None:
    result = validate_curve([0.2, 0.3, 0.25, 0.4, 0.5])

    assert result.valid
    assert result.warnings == ()


def test_hard_flat_curve_collects_warnings() -> None:
    result = validate_curve([0.5, 0.6, 0.55])

    assert not result.valid
    assert any("Initial difficulty is 0.50" in warning for warning in result.warnings)
    assert any("range is only 0.10" in warning for warning in result.warnings)


def test_empty_and_short_curves() -> None:
    assert not validate_curve([]).valid
    short = validate_curve([0.1, 0.4])
    assert any("only 2 point(s)" in suggestion for suggestion in short.suggestions)


def test_long_climb_and_steep_step_are_suggestions() -> None:
    result = validate_curve([0.0, 0.05, 0.1, 0.15, 0.2, 0.25, 0.7, 0.6])

    assert any("run of 7" in suggestion for suggestion in result.suggestions)
    assert any("largest single-step" in suggestion for suggestion in result.suggestions)


def test_generated_action_spec_has_meaningful_play() -> None:
    spec = generate(GENRE_DEFAULTS["action"], seed=2024)
    result = validate_meaningful_play(spec)

    assert result.valid
    assert result.warnings == ()


def test_missing_systems_and_scoring_are_warnings() -> None:
    spec = generate(GENRE_DEFAULTS["action"], seed=2024)
    stripped = replace(spec, systems=(), rules=())

    result = validate_meaningful_play(stripped)

    assert not result.valid
    assert any('Verb "jump" has no corresponding system' in warning for warning in result.warnings)
    assert any("No scoring rule" in warning for warning in result.warnings)
    assert any("progression" in suggestion for suggestion in result.suggestions)


def test_difficulty_validator_reads_the_spec_curve() -> None:
    spec = generate(replace(GENRE_DEFAULTS["action"], difficulty_style="rollercoaster"), seed=5)

    assert validate_difficulty(spec) == validate_curve(spec.difficulty.curve)
