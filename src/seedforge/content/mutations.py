from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from seedforge.chaos.mutations import (
    DEFAULT_REGISTRY,
    MUTATION_CATEGORIES,
    PERMANENT_DURATION,
    Effect,
    MutationDef,
    MutationRegistry,
    NegateField,
    PickOther,
    RandomInt,
    SessionState,
    SetField,
    state_field_default,
)

MUTATION_CATALOG_SCHEMA_VERSION = 1
DEFAULT_MUTATIONS_DIR = "content/mutations"
PERMANENT_DURATION_LABEL = "permanent"

EFFECT_OPS = ("set", "negate", "pick_other", "random_int")
_STATE_FIELDS = frozenset(SessionState.field_names())


def load_mutation_catalog_json(path: str | Path) -> MutationRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return _registry_from_payload(payload)


def load_mutation_catalogs(
    directory: str | Path = DEFAULT_MUTATIONS_DIR,
    *,
    base: MutationRegistry | None = DEFAULT_REGISTRY,
) -> MutationRegistry:
    """Merge every ``*.json`` catalog in ``directory`` (name order) onto ``base``.

    A mutation id already present in ``base`` or an earlier catalog is rejected.
    """
    registry = base if base is not None else MutationRegistry(mutations=())
    for path in sorted(Path(directory).glob("*.json")):
        try:
            registry = registry.merged(load_mutation_catalog_json(path))
        except ValueError as exc:
            raise ValueError(f"{path.name}: {exc}") from exc
    return registry


def _value_matches_field(field_name: str, value: Any) -> bool:
    default = state_field_default(field_name)
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool)
    if isinstance(default, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default))


def _coerce(field_name: str, value: Any) -> Any:
    if isinstance(state_field_default(field_name), float):
        return float(value)
    return value


def _effect_from_payload(row: Any, where: str) -> Effect:
    if not isinstance(row, dict):
        raise ValueError(f"{where} must be an object")
    op = row.get("op")
    if op not in EFFECT_OPS:
        raise ValueError(f"{where}.op must be one of {', '.join(EFFECT_OPS)}")
    field_name = row.get("field")
    if field_name not in _STATE_FIELDS:
        raise ValueError(f"{where}.field must name a session state field; got {field_name!r}")

    if op == "set":
        if "value" not in row:
            raise ValueError(f"{where}.value is required for set")
        value = row["value"]
        if not _value_matches_field(field_name, value):
            raise ValueError(f"{where}.value has the wrong type for {field_name}")
        return SetField(field_name, _coerce(field_name, value))

    if op == "negate":
        default = state_field_default(field_name)
        if isinstance(default, bool) or not isinstance(default, (int, float)):
            raise ValueError(f"{where}.field must be numeric for negate")
        return NegateField(field_name)

    if op == "pick_other":
        options = row.get("options")
        if not isinstance(options, list) or len(options) < 2:
            raise ValueError(f"{where}.options must be a list of at least two values")
        for option_index, option in enumerate(options):
            if not _value_matches_field(field_name, option):
                raise ValueError(f"{where}.options[{option_index}] has the wrong type for {field_name}")
        return PickOther(field_name, tuple(_coerce(field_name, option) for option in options))

    low = row.get("low")
    high = row.get("high")
    if not isinstance(low, int) or isinstance(low, bool) or not isinstance(high, int) or isinstance(high, bool):
        raise ValueError(f"{where}.low and {where}.high must be integers")
    if high < low:
        raise ValueError(f"{where}.high must be >= low")
    if not isinstance(state_field_default(field_name), int) or isinstance(state_field_default(field_name), bool):
        raise ValueError(f"{where}.field must be an integer field for random_int")
    return RandomInt(field_name, low, high)


def _registry_from_payload(payload: dict[str, Any]) -> MutationRegistry:
    if not isinstance(payload, dict):
        raise ValueError("mutation catalog payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("mutation catalog must contain integer field: schema_version")
    if schema_version != MUTATION_CATALOG_SCHEMA_VERSION:
        raise ValueError(f"unsupported mutation catalog schema_version: {schema_version}")

    mutations = payload.get("mutations")
    if not isinstance(mutations, list):
        raise ValueError("mutation catalog must contain list field: mutations")

    normalized: list[MutationDef] = []
    seen_mutation_ids: set[str] = set()
    for index, row in enumerate(mutations):
        where = f"mutations[{index}]"
        if not isinstance(row, dict):
            raise ValueError(f"{where} must be an object")

        mutation_id = row.get("mutation_id")
        if not isinstance(mutation_id, str) or not mutation_id:
            raise ValueError(f"{where}.mutation_id must be a non-empty string")
        if mutation_id in seen_mutation_ids:
            raise ValueError(f"duplicate mutation_id: {mutation_id}")
        seen_mutation_ids.add(mutation_id)

        name = row.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"{where}.name must be a non-empty string")
        description = row.get("description", "")
        if not isinstance(description, str):
            raise ValueError(f"{where}.description must be a string when present")

        category = row.get("category")
        if category not in MUTATION_CATEGORIES:
            raise ValueError(f"{where}.category must be one of {', '.join(MUTATION_CATEGORIES)}")

        min_chaos_level = row.get("min_chaos_level")
        if not isinstance(min_chaos_level, int) or isinstance(min_chaos_level, bool):
            raise ValueError(f"{where}.min_chaos_level must be an integer")
        if not 0 <= min_chaos_level <= 100:
            raise ValueError(f"{where}.min_chaos_level must be in [0, 100]")

        duration = row.get("duration_ms")
        if duration == PERMANENT_DURATION_LABEL:
            duration_ms = PERMANENT_DURATION
        elif isinstance(duration, int) and not isinstance(duration, bool) and duration > 0:
            duration_ms = duration
        else:
            raise ValueError(f"{where}.duration_ms must be a positive integer or {PERMANENT_DURATION_LABEL!r}")

        effects_payload = row.get("effects")
        if not isinstance(effects_payload, list) or not effects_payload:
            raise ValueError(f"{where}.effects must be a non-empty list")
        effects = tuple(
            _effect_from_payload(effect_row, f"{where}.effects[{effect_index}]")
            for effect_index, effect_row in enumerate(effects_payload)
        )

        normalized.append(
            MutationDef(
                mutation_id=mutation_id,
                name=name,
                description=description,
                category=category,
                min_chaos_level=min_chaos_level,
                duration_ms=duration_ms,
                effects=effects,
            )
        )

    return MutationRegistry(mutations=tuple(normalized))
