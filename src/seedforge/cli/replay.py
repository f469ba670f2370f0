from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from seedforge.content.io import load_spec_payload, save_spec_json
from seedforge.gen.choices import ChoiceVector
from seedforge.gen.hash import spec_hash
from seedforge.gen.pipeline import choices_from_decoded, generate_from_seed_code
from seedforge.gen.seed_code import decode_seed_code

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seedforge-replay",
        description=(
            "Rebuild a specification from its seed code. Fields the code does not carry "
            "come from --choices or from the choices stored in --verify; otherwise genre defaults."
        ),
    )
    parser.add_argument("seed_code", help="Seed code such as ACTN-JUMP-NORM-COLR015-0A1B2C3")
    parser.add_argument("--choices", help="Path to a choice vector JSON supplying fields the code lacks")
    parser.add_argument(
        "--verify",
        help="Path to a stored spec document; exits 1 unless the replayed spec hash matches it",
    )
    parser.add_argument("--out", help="Write the replayed spec document to this path")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Logging level")
    return parser


def _print_decoded(code: str) -> None:
    decoded = decode_seed_code(code)
    print(
        "decoded "
        f"valid={decoded.is_valid} "
        f"genre={decoded.genre} "
        f"verb={decoded.verb} "
        f"gravity={decoded.gravity} "
        f"world_difference={decoded.world_difference} "
        f"chaos_level={decoded.chaos_level} "
        f"internal_seed={decoded.internal_seed}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        stored = load_spec_payload(args.verify) if args.verify else None

        base_choices: ChoiceVector | None = None
        if args.choices:
            base_choices = ChoiceVector.from_dict(json.loads(Path(args.choices).read_text(encoding="utf-8")))
        elif stored is not None and "choices" in stored:
            base_choices = ChoiceVector.from_dict(stored["choices"])

        _print_decoded(args.seed_code)
        spec = generate_from_seed_code(args.seed_code, base_choices=base_choices)
        replayed_hash = spec_hash(spec)
        print(f"seed_code={spec.seed_code}")
        print(f"game_id={spec.game_id}")
        print(f"spec_hash={replayed_hash}")

        if stored is not None:
            if stored["spec_hash"] != replayed_hash:
                print(f"verify=MISMATCH stored={stored['spec_hash']} replayed={replayed_hash}")
                return 1
            print("verify=OK")

        if args.out:
            decoded = decode_seed_code(args.seed_code)
            choices = choices_from_decoded(decoded, base_choices) if decoded.is_valid else None
            save_spec_json(args.out, spec, choices)
            print(f"wrote={args.out}")

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
