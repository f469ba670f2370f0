from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from seedforge.content.dna import (
    DEFAULT_PRESETS_PATH,
    DEFAULT_QUESTION_BANKS_PATH,
    load_presets_json,
    load_question_banks_json,
)
from seedforge.content.io import save_spec_json
from seedforge.gen.choices import GENRE_DEFAULTS, GENRES, ChoiceVector
from seedforge.gen.dna import DnaAnswers, extract_visible_genes, map_answers_to_choices
from seedforge.gen.hash import spec_hash
from seedforge.gen.pipeline import generate
from seedforge.gen.spec import GameSpecification
from seedforge.gen.validation import validate_difficulty, validate_meaningful_play

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seedforge-generate",
        description=(
            "Synthesize a game specification from a choice vector, a classic preset or "
            "questionnaire answers. Prints the seed code and canonical spec hash."
        ),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--choices", help="Path to a choice vector JSON object")
    source.add_argument("--preset", help="Classic preset id from the presets file")
    source.add_argument("--dna", help="Path to questionnaire answers JSON (genre, answers, scene_description)")
    source.add_argument("--genre", choices=GENRES, help="Use the genre's default choices")
    source.add_argument("--list-presets", action="store_true", help="Print available preset ids and exit")
    parser.add_argument("--chaos", type=int, help="Override the chaos level (clamped to 0..100)")
    parser.add_argument("--seed", type=int, help="Generate with this internal seed instead of a fresh one")
    parser.add_argument("--out", help="Write the spec document (spec + choices + spec_hash) to this path")
    parser.add_argument("--force", action="store_true", help="Overwrite --out if it already exists")
    parser.add_argument("--print-validation", action="store_true", help="Print validator findings")
    parser.add_argument("--presets-path", default=DEFAULT_PRESETS_PATH, help="Presets JSON path")
    parser.add_argument("--banks-path", default=DEFAULT_QUESTION_BANKS_PATH, help="Question banks JSON path")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Logging level")
    return parser


def _resolve_choices(args: argparse.Namespace) -> ChoiceVector:
    if args.choices:
        payload = json.loads(Path(args.choices).read_text(encoding="utf-8"))
        return ChoiceVector.from_dict(payload)
    if args.preset:
        presets = load_presets_json(args.presets_path).by_id()
        if args.preset not in presets:
            raise ValueError(f"unknown preset: {args.preset} (known: {', '.join(sorted(presets))})")
        return presets[args.preset].choices
    if args.dna:
        answers = DnaAnswers.from_dict(json.loads(Path(args.dna).read_text(encoding="utf-8")))
        banks = load_question_banks_json(args.banks_path)
        for icon, label in extract_visible_genes(answers, banks):
            print(f"gene {icon} {label}")
        return map_answers_to_choices(answers, banks)
    return GENRE_DEFAULTS[args.genre]


def _print_summary(spec: GameSpecification) -> None:
    print(f"seed_code={spec.seed_code}")
    print(f"game_id={spec.game_id}")
    print(f"name={spec.name}")
    print(
        "summary "
        f"genre={spec.genre} "
        f"visual_style={spec.visual_style} "
        f"verbs={','.join(spec.verbs)} "
        f"entity_count={len(spec.entities)} "
        f"system_count={len(spec.systems)} "
        f"rule_count={len(spec.rules)} "
        f"chaos_level={spec.chaos.level}"
    )
    print(f"spec_hash={spec_hash(spec)}")


def _print_validation(spec: GameSpecification) -> None:
    for name, result in (
        ("meaningful_play", validate_meaningful_play(spec)),
        ("difficulty", validate_difficulty(spec)),
    ):
        print(f"validation.{name} valid={result.valid}")
        for warning in result.warnings:
            print(f"validation.{name}.warning {warning}")
        for suggestion in result.suggestions:
            print(f"validation.{name}.suggestion {suggestion}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.list_presets:
            for preset in load_presets_json(args.presets_path).presets:
                print(f"preset {preset.preset_id} genre={preset.choices.genre} name={preset.name}")
            return 0

        out_path = Path(args.out) if args.out else None
        if out_path is not None and out_path.exists() and not args.force:
            raise ValueError(f"output exists: {out_path} (use --force to overwrite)")

        choices = _resolve_choices(args)
        choices = choices.with_chaos_level(args.chaos if args.chaos is not None else choices.chaos_level)

        spec = generate(choices, seed=args.seed)
        _print_summary(spec)
        if args.print_validation:
            _print_validation(spec)

        if out_path is not None:
            save_spec_json(out_path, spec, choices)
            print(f"wrote={out_path}")

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
