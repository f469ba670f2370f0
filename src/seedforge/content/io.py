from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.hash import payload_hash, spec_hash
from seedforge.gen.spec import SPEC_SCHEMA_VERSION, GameSpecification

SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


def _build_spec_document(spec: GameSpecification, choices: ChoiceVector | None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "spec": spec.to_dict(),
        "spec_hash": spec_hash(spec),
    }
    if choices is not None:
        payload["choices"] = choices.to_dict()
    return payload


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _validate_spec_document(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("spec document must be an object")
    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("spec document must contain integer field: schema_version")
    if schema_version != SCHEMA_VERSION:
        raise ValueError(f"unsupported spec document schema_version: {schema_version}")
    spec = payload.get("spec")
    if not isinstance(spec, dict):
        raise ValueError("spec document must contain object field: spec")
    if spec.get("schema_version") != SPEC_SCHEMA_VERSION:
        raise ValueError(f"unsupported spec schema_version: {spec.get('schema_version')}")
    if not isinstance(payload.get("spec_hash"), str):
        raise ValueError("spec document must contain string field: spec_hash")
    if "choices" in payload and not isinstance(payload["choices"], dict):
        raise ValueError("spec document field choices must be an object when present")


def save_spec_json(path: str | Path, spec: GameSpecification, choices: ChoiceVector | None = None) -> str:
    """Write ``spec`` (and optionally the choices behind it); return its hash."""
    payload = _build_spec_document(spec, choices)
    _validate_spec_document(payload)
    _write_atomic_json(path, payload)
    return payload["spec_hash"]


def load_spec_payload(path: str | Path) -> dict[str, Any]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    _validate_spec_document(payload)

    expected_hash = payload["spec_hash"]
    actual_hash = payload_hash(payload["spec"])
    if expected_hash != actual_hash:
        raise ValueError(
            f"spec_hash mismatch while loading spec (stored={expected_hash}, recomputed={actual_hash})"
        )
    return payload


def load_spec_choices(path: str | Path) -> ChoiceVector | None:
    payload = load_spec_payload(path)
    if "choices" not in payload:
        return None
    return ChoiceVector.from_dict(payload["choices"])
