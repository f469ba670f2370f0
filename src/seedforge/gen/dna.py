"""Questionnaire answers -> choice vector.

A player answers a short per-genre questionnaire instead of filling in every
choice field. Mapping starts from the genre defaults and overlays each
answered option in bank order: scalar fields overwrite, verbs accumulate
without duplicates. The result always carries at least one verb and its
verbs are sorted, so the same answers map to the same vector.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from seedforge.content.dna import DnaOption, QuestionBank, QuestionBankRegistry
from seedforge.gen.choices import GENRE_DEFAULTS, GENRES, ChoiceVector

CUSTOM_ELEMENT_LIMIT = 50


@dataclass(frozen=True)
class DnaAnswers:
    genre: str
    answers: Mapping[str, str] = field(default_factory=dict)
    scene_description: str = ""
    chaos_level: int = 0

    def __post_init__(self) -> None:
        if self.genre not in GENRES:
            raise ValueError(f"genre must be one of {', '.join(GENRES)}; got {self.genre!r}")
        object.__setattr__(self, "answers", dict(self.answers))

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "DnaAnswers":
        if not isinstance(payload, dict):
            raise ValueError("dna answer payload must be an object")
        answers = payload.get("answers", {})
        if not isinstance(answers, dict):
            raise ValueError("answers must be an object when present")
        for question_id, option_id in answers.items():
            if not isinstance(option_id, str):
                raise ValueError(f"answers.{question_id} must be a string")
        chaos_level = payload.get("chaos_level", 0)
        if isinstance(chaos_level, bool) or not isinstance(chaos_level, (int, float)):
            raise ValueError("chaos_level must be numeric")
        return cls(
            genre=str(payload.get("genre", "")),
            answers=answers,
            scene_description=str(payload.get("scene_description", "")),
            chaos_level=chaos_level,
        )


def _selected_options(bank: QuestionBank, answers: Mapping[str, str]) -> list[DnaOption]:
    selected: list[DnaOption] = []
    for question in bank.questions:
        option_id = answers.get(question.question_id)
        if option_id is None:
            continue
        option = question.option(option_id)
        if option is not None:
            selected.append(option)
    return selected


def map_answers_to_choices(answers: DnaAnswers, banks: QuestionBankRegistry) -> ChoiceVector:
    """Fold answered options onto the genre defaults.

    Answers naming an unknown question or option are ignored.
    """
    bank = banks.bank_for(answers.genre)
    defaults = GENRE_DEFAULTS[answers.genre]
    overrides: dict[str, str] = {}
    verbs: list[str] = []
    for option in _selected_options(bank, answers.answers):
        overrides.update(dict(option.mapping.scalars))
        for verb in option.mapping.verbs:
            if verb not in verbs:
                verbs.append(verb)

    if not verbs:
        verbs = list(defaults.verbs)

    custom_element = defaults.custom_element
    if answers.scene_description.strip():
        custom_element = answers.scene_description[:CUSTOM_ELEMENT_LIMIT]

    choices = replace(
        defaults,
        verbs=tuple(sorted(verbs)),
        custom_element=custom_element,
        **overrides,
    )
    return choices.with_chaos_level(answers.chaos_level)


def extract_visible_genes(answers: DnaAnswers, banks: QuestionBankRegistry) -> list[tuple[str, str]]:
    """(icon, label) of every selected option, in question order."""
    bank = banks.bank_for(answers.genre)
    return [(option.icon, option.label) for option in _selected_options(bank, answers.answers)]
