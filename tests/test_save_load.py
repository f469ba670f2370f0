import json
from pathlib import Path

import pytest

from seedforge.content.io import load_spec_choices, load_spec_payload, save_spec_json
from seedforge.gen.choices import GENRE_DEFAULTS
from seedforge.gen.hash import payload_hash, spec_hash
from seedforge.gen.pipeline import generate


def test_save_then_load_round_trip_matches_spec_hash(tmp_path: Path) -> None:
    spec = generate(GENRE_DEFAULTS["puzzle_logic"], seed=123)
    out_path = tmp_path / "spec.json"

    stored_hash = save_spec_json(out_path, spec)
    payload = load_spec_payload(out_path)

    assert stored_hash == spec_hash(spec)
    assert payload["spec_hash"] == stored_hash
    assert payload_hash(payload["spec"]) == stored_hash
    assert "choices" not in payload


def test_save_writes_schema_version_and_choices(tmp_path: Path) -> None:
    choices = GENRE_DEFAULTS["card"].with_chaos_level(40)
    spec = generate(choices, seed=5)
    out_path = tmp_path / "nested" / "spec.json"

    save_spec_json(out_path, spec, choices)
    raw = json.loads(out_path.read_text(encoding="utf-8"))

    assert raw["schema_version"] == 1
    assert raw["spec"]["seed_code"] == spec.seed_code
    assert load_spec_choices(out_path) == choices
    assert list(out_path.parent.glob("*.tmp")) == []


def test_load_spec_choices_is_none_without_choices(tmp_path: Path) -> None:
    out_path = tmp_path / "spec.json"
    save_spec_json(out_path, generate(GENRE_DEFAULTS["rhythm"], seed=8))

    assert load_spec_choices(out_path) is None


def test_tampered_spec_fails_hash_check(tmp_path: Path) -> None:
    out_path = tmp_path / "spec.json"
    save_spec_json(out_path, generate(GENRE_DEFAULTS["action"], seed=31))
    raw = json.loads(out_path.read_text(encoding="utf-8"))
    raw["spec"]["name"] = "Someone Else's World"
    out_path.write_text(json.dumps(raw), encoding="utf-8")

    with pytest.raises(ValueError, match="spec_hash mismatch while loading spec"):
        load_spec_payload(out_path)


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (lambda raw: raw.update(schema_version=2), "unsupported spec document schema_version: 2"),
        (lambda raw: raw.pop("spec"), "must contain object field: spec"),
        (lambda raw: raw.update(spec_hash=12), "must contain string field: spec_hash"),
        (lambda raw: raw["spec"].update(schema_version=7), "unsupported spec schema_version: 7"),
        (lambda raw: raw.update(choices=["action"]), "choices must be an object when present"),
    ],
)
def test_malformed_documents_are_rejected(tmp_path: Path, mutate, message: str) -> None:
    out_path = tmp_path / "spec.json"
    save_spec_json(out_path, generate(GENRE_DEFAULTS["board"], seed=2))
    raw = json.loads(out_path.read_text(encoding="utf-8"))
    mutate(raw)
    out_path.write_text(json.dumps(raw), encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_spec_payload(out_path)
