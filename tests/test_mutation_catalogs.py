import json
from pathlib import Path

import pytest

from seedforge.chaos.mutations import DEFAULT_REGISTRY, PERMANENT_DURATION, SessionState
from seedforge.chaos.session import ChaosSession
from seedforge.content.mutations import load_mutation_catalog_json, load_mutation_catalogs


def _write_catalog(path: Path, mutations: list[dict]) -> Path:
    path.write_text(json.dumps({"schema_version": 1, "mutations": mutations}), encoding="utf-8")
    return path


def _row(mutation_id: str, **overrides: object) -> dict:
    row = {
        "mutation_id": mutation_id,
        "name": mutation_id.title(),
        "category": "physics",
        "min_chaos_level": 10,
        "duration_ms": 5000,
        "effects": [{"op": "set", "field": "friction", "value": 0.5}],
    }
    row.update(overrides)
    return row


def test_default_catalog_directory_merges_onto_builtins() -> None:
    registry = load_mutation_catalogs()
    by_id = registry.by_id()

    assert set(DEFAULT_REGISTRY.by_id()) < set(by_id)
    assert by_id["heavy_world"].effects[0].value == 1600.0
    assert isinstance(by_id["heavy_world"].effects[0].value, float)
    assert by_id["enemy_mood_swing"].category == "entity"
    assert by_id["hud_jitter"].min_chaos_level == 90


def test_catalog_duplicating_builtin_id_is_rejected(tmp_path: Path) -> None:
    _write_catalog(tmp_path / "dupe.json", [_row("gravity_flip")])

    with pytest.raises(ValueError, match="dupe.json: duplicate mutation_id: gravity_flip"):
        load_mutation_catalogs(tmp_path)


def test_catalog_without_base_loads_alone(tmp_path: Path) -> None:
    _write_catalog(tmp_path / "a.json", [_row("gravity_flip")])

    registry = load_mutation_catalogs(tmp_path, base=None)

    assert [mutation.mutation_id for mutation in registry.mutations] == ["gravity_flip"]


def test_permanent_label_loads_as_permanent(tmp_path: Path) -> None:
    path = _write_catalog(
        tmp_path / "perm.json",
        [_row("forever_goal", category="narrative", duration_ms="permanent", effects=[
            {"op": "pick_other", "field": "goal_type", "options": ["survive_time", "collect_all"]},
        ])],
    )

    mutation = load_mutation_catalog_json(path).by_id()["forever_goal"]

    assert mutation.duration_ms == PERMANENT_DURATION
    assert mutation.is_permanent


@pytest.mark.parametrize(
    ("effect", "message"),
    [
        ({"op": "set", "field": "friction", "value": "slick"}, r"effects\[0\].value has the wrong type for friction"),
        ({"op": "set", "field": "mirror_x", "value": 1}, r"value has the wrong type for mirror_x"),
        ({"op": "set", "field": "wind", "value": 1.0}, r"effects\[0\].field must name a session state field"),
        ({"op": "teleport", "field": "friction"}, r"effects\[0\].op must be one of"),
        ({"op": "negate", "field": "enemy_behavior"}, r"must be numeric for negate"),
        ({"op": "pick_other", "field": "goal_type", "options": ["collect_all"]}, r"at least two values"),
        ({"op": "random_int", "field": "friction", "low": 0, "high": 3}, r"integer field for random_int"),
        ({"op": "random_int", "field": "trap_damage", "low": 4, "high": 3}, r"high must be >= low"),
    ],
)
def test_bad_effects_are_rejected_with_their_path(tmp_path: Path, effect: dict, message: str) -> None:
    path = _write_catalog(tmp_path / "bad.json", [_row("broken", effects=[effect])])

    with pytest.raises(ValueError, match=message):
        load_mutation_catalog_json(path)


def test_bad_catalog_rows_are_rejected(tmp_path: Path) -> None:
    path = _write_catalog(tmp_path / "bad.json", [_row("slow", duration_ms=0)])
    with pytest.raises(ValueError, match=r"mutations\[0\].duration_ms must be a positive integer or 'permanent'"):
        load_mutation_catalog_json(path)

    path = _write_catalog(tmp_path / "bad.json", [_row("twice"), _row("twice")])
    with pytest.raises(ValueError, match="duplicate mutation_id: twice"):
        load_mutation_catalog_json(path)

    path.write_text(json.dumps({"schema_version": 2, "mutations": []}), encoding="utf-8")
    with pytest.raises(ValueError, match="unsupported mutation catalog schema_version: 2"):
        load_mutation_catalog_json(path)


def test_session_runs_on_merged_registry() -> None:
    registry = load_mutation_catalogs()
    session = ChaosSession(100, seed=17, registry=registry)

    session.activate("heavy_world")
    assert session.state.gravity_y == 1600.0

    session.advance_to(600_000)
    session.teardown()

    assert session.state.gravity_y == SessionState().gravity_y
