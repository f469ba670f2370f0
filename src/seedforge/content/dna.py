from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from seedforge.gen.choices import (
    CHARACTER_ARCHETYPES,
    CORE_VERBS,
    DIFFICULTY_STYLES,
    GAME_PACES,
    GENRES,
    GRAVITY_MODES,
    SKILL_LUCK_RATIOS,
    SPECIAL_PHYSICS,
    VISUAL_STYLES,
    WORLD_BOUNDARIES,
    ChoiceVector,
)

DNA_SCHEMA_VERSION = 1
DEFAULT_QUESTION_BANKS_PATH = "content/dna/question_banks.json"
DEFAULT_PRESETS_PATH = "content/dna/presets.json"

# Scalar mapping keys and the values each may take. world_difference is free
# text, so any non-empty string is accepted for it.
SCALAR_MAPPING_FIELDS: dict[str, tuple[str, ...] | None] = {
    "visual_style": VISUAL_STYLES,
    "gravity": GRAVITY_MODES,
    "boundary": WORLD_BOUNDARIES,
    "special_physics": SPECIAL_PHYSICS,
    "world_difference": None,
    "character_archetype": CHARACTER_ARCHETYPES,
    "difficulty_style": DIFFICULTY_STYLES,
    "game_pace": GAME_PACES,
    "skill_luck_ratio": SKILL_LUCK_RATIOS,
}
VERBS_MAPPING_FIELD = "verbs"


@dataclass(frozen=True)
class DnaMapping:
    """Partial choice overlay attached to one answer option."""

    scalars: tuple[tuple[str, str], ...] = ()
    verbs: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.scalars)
        if self.verbs:
            payload[VERBS_MAPPING_FIELD] = list(self.verbs)
        return payload


@dataclass(frozen=True)
class DnaOption:
    option_id: str
    icon: str
    label: str
    description: str
    mapping: DnaMapping


@dataclass(frozen=True)
class DnaQuestion:
    question_id: str
    prompt: str
    options: tuple[DnaOption, ...]

    def option(self, option_id: str) -> DnaOption | None:
        for option in self.options:
            if option.option_id == option_id:
                return option
        return None


@dataclass(frozen=True)
class QuestionBank:
    genre: str
    questions: tuple[DnaQuestion, ...]


@dataclass(frozen=True)
class QuestionBankRegistry:
    schema_version: int
    banks: tuple[QuestionBank, ...]

    def by_genre(self) -> dict[str, QuestionBank]:
        return {bank.genre: bank for bank in self.banks}

    def bank_for(self, genre: str) -> QuestionBank:
        bank = self.by_genre().get(genre)
        if bank is None:
            raise ValueError(f"no question bank for genre: {genre}")
        return bank


@dataclass(frozen=True)
class DnaPreset:
    preset_id: str
    name: str
    icon: str
    story: str
    choices: ChoiceVector


@dataclass(frozen=True)
class PresetRegistry:
    schema_version: int
    presets: tuple[DnaPreset, ...]

    def by_id(self) -> dict[str, DnaPreset]:
        return {preset.preset_id: preset for preset in self.presets}


def load_question_banks_json(path: str | Path = DEFAULT_QUESTION_BANKS_PATH) -> QuestionBankRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return question_banks_from_payload(payload)


def load_presets_json(path: str | Path = DEFAULT_PRESETS_PATH) -> PresetRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return presets_from_payload(payload)


def _require_schema_version(payload: Any, label: str) -> int:
    if not isinstance(payload, dict):
        raise ValueError(f"{label} payload must be an object")
    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int) or isinstance(schema_version, bool):
        raise ValueError(f"{label} must contain integer field: schema_version")
    if schema_version != DNA_SCHEMA_VERSION:
        raise ValueError(f"unsupported {label} schema_version: {schema_version}")
    return schema_version


def _require_text(row: dict[str, Any], key: str, where: str, *, allow_empty: bool = False) -> str:
    value = row.get(key, "" if allow_empty else None)
    if not isinstance(value, str) or (not allow_empty and not value):
        raise ValueError(f"{where}.{key} must be a non-empty string")
    return value


def _mapping_from_payload(payload: Any, where: str) -> DnaMapping:
    if not isinstance(payload, dict):
        raise ValueError(f"{where} must be an object")
    scalars: list[tuple[str, str]] = []
    verbs: list[str] = []
    for key in sorted(payload):
        value = payload[key]
        if key == VERBS_MAPPING_FIELD:
            if not isinstance(value, list) or not value:
                raise ValueError(f"{where}.verbs must be a non-empty list")
            for verb_index, verb in enumerate(value):
                if verb not in CORE_VERBS:
                    raise ValueError(f"{where}.verbs[{verb_index}] must be one of {', '.join(CORE_VERBS)}")
                if verb not in verbs:
                    verbs.append(verb)
            continue
        if key not in SCALAR_MAPPING_FIELDS:
            raise ValueError(f"{where}.{key} is not a recognised mapping field")
        allowed = SCALAR_MAPPING_FIELDS[key]
        if not isinstance(value, str) or not value:
            raise ValueError(f"{where}.{key} must be a non-empty string")
        if allowed is not None and value not in allowed:
            raise ValueError(f"{where}.{key} must be one of {', '.join(allowed)}")
        scalars.append((key, value))
    return DnaMapping(scalars=tuple(scalars), verbs=tuple(verbs))


def _question_from_payload(row: Any, where: str) -> DnaQuestion:
    if not isinstance(row, dict):
        raise ValueError(f"{where} must be an object")
    question_id = _require_text(row, "question_id", where)
    prompt = _require_text(row, "prompt", where)
    options_payload = row.get("options")
    if not isinstance(options_payload, list) or not options_payload:
        raise ValueError(f"{where}.options must be a non-empty list")

    options: list[DnaOption] = []
    seen_option_ids: set[str] = set()
    for option_index, option_row in enumerate(options_payload):
        option_where = f"{where}.options[{option_index}]"
        if not isinstance(option_row, dict):
            raise ValueError(f"{option_where} must be an object")
        option_id = _require_text(option_row, "option_id", option_where)
        if option_id in seen_option_ids:
            raise ValueError(f"duplicate option_id in {where}: {option_id}")
        seen_option_ids.add(option_id)
        options.append(
            DnaOption(
                option_id=option_id,
                icon=_require_text(option_row, "icon", option_where, allow_empty=True),
                label=_require_text(option_row, "label", option_where),
                description=_require_text(option_row, "description", option_where, allow_empty=True),
                mapping=_mapping_from_payload(option_row.get("mapping"), f"{option_where}.mapping"),
            )
        )
    return DnaQuestion(question_id=question_id, prompt=prompt, options=tuple(options))


def question_banks_from_payload(payload: dict[str, Any]) -> QuestionBankRegistry:
    schema_version = _require_schema_version(payload, "question bank")

    banks_payload = payload.get("banks")
    if not isinstance(banks_payload, list):
        raise ValueError("question bank must contain list field: banks")

    banks: list[QuestionBank] = []
    seen_genres: set[str] = set()
    for index, row in enumerate(banks_payload):
        if not isinstance(row, dict):
            raise ValueError(f"banks[{index}] must be an object")
        genre = row.get("genre")
        if genre not in GENRES:
            raise ValueError(f"banks[{index}].genre must be one of {', '.join(GENRES)}")
        if genre in seen_genres:
            raise ValueError(f"duplicate question bank genre: {genre}")
        seen_genres.add(genre)

        questions_payload = row.get("questions")
        if not isinstance(questions_payload, list) or not questions_payload:
            raise ValueError(f"banks[{index}].questions must be a non-empty list")
        questions: list[DnaQuestion] = []
        seen_question_ids: set[str] = set()
        for question_index, question_row in enumerate(questions_payload):
            question = _question_from_payload(question_row, f"questions[{question_index}]")
            if question.question_id in seen_question_ids:
                raise ValueError(f"duplicate question_id in {genre} bank: {question.question_id}")
            seen_question_ids.add(question.question_id)
            questions.append(question)
        banks.append(QuestionBank(genre=genre, questions=tuple(questions)))

    return QuestionBankRegistry(schema_version=schema_version, banks=tuple(banks))


def presets_from_payload(payload: dict[str, Any]) -> PresetRegistry:
    schema_version = _require_schema_version(payload, "preset registry")

    presets_payload = payload.get("presets")
    if not isinstance(presets_payload, list):
        raise ValueError("preset registry must contain list field: presets")

    presets: list[DnaPreset] = []
    seen_preset_ids: set[str] = set()
    for index, row in enumerate(presets_payload):
        where = f"presets[{index}]"
        if not isinstance(row, dict):
            raise ValueError(f"{where} must be an object")
        preset_id = _require_text(row, "preset_id", where)
        if preset_id in seen_preset_ids:
            raise ValueError(f"duplicate preset_id: {preset_id}")
        seen_preset_ids.add(preset_id)
        try:
            choices = ChoiceVector.from_dict(row.get("choices"))
        except ValueError as exc:
            raise ValueError(f"{where}.choices invalid: {exc}") from exc
        presets.append(
            DnaPreset(
                preset_id=preset_id,
                name=_require_text(row, "name", where),
                icon=_require_text(row, "icon", where, allow_empty=True),
                story=_require_text(row, "story", where, allow_empty=True),
                choices=choices.with_chaos_level(choices.chaos_level),
            )
        )

    return PresetRegistry(schema_version=schema_version, presets=tuple(presets))
