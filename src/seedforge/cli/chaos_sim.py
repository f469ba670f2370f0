from __future__ import annotations

import argparse
import logging
from typing import Any, Sequence

from seedforge.chaos.mutations import DEFAULT_REGISTRY
from seedforge.chaos.presets import PRESET_LABELS, PRESET_LEVELS, level_to_preset_label
from seedforge.chaos.session import ChaosSession
from seedforge.content.mutations import DEFAULT_MUTATIONS_DIR, load_mutation_catalogs

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_DURATION_MS = 300_000


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seedforge-chaos",
        description=(
            "Simulate a chaos session at a given level and print the activation/revert trace. "
            "The same seed and level always print the same trace."
        ),
    )
    level = parser.add_mutually_exclusive_group()
    level.add_argument("--level", type=int, default=None, help="Chaos level (clamped to 0..100)")
    level.add_argument("--preset", choices=PRESET_LABELS, help="Named chaos preset")
    parser.add_argument("--seed", type=int, default=0, help="Session seed (default: 0)")
    parser.add_argument(
        "--duration-ms",
        type=_non_negative_int,
        default=DEFAULT_DURATION_MS,
        help="Simulated session length in milliseconds",
    )
    parser.add_argument(
        "--step-ms",
        type=_positive_int,
        default=None,
        help="Advance the clock in steps of this size and print the state after each",
    )
    parser.add_argument(
        "--catalog-dir",
        default=DEFAULT_MUTATIONS_DIR,
        help="Directory of extra mutation catalogs merged onto the built-in set",
    )
    parser.add_argument("--builtin-only", action="store_true", help="Ignore external mutation catalogs")
    parser.add_argument("--no-teardown", action="store_true", help="Leave mutations active at the end")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Logging level")
    return parser


def _format_trace_entry(entry: dict[str, Any]) -> str:
    parts = [f"time_ms={entry['time_ms']}", f"event={entry['event']}"]
    for key in ("mutation_id", "category", "reason"):
        if key in entry:
            parts.append(f"{key}={entry[key]}")
    if "fields" in entry:
        parts.append(f"fields={','.join(entry['fields'])}")
    return "trace " + " ".join(parts)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.preset is not None:
            chaos_level = PRESET_LEVELS[args.preset]
        elif args.level is not None:
            chaos_level = args.level
        else:
            chaos_level = PRESET_LEVELS["emergent"]

        if args.builtin_only:
            registry = DEFAULT_REGISTRY
        else:
            registry = load_mutation_catalogs(args.catalog_dir)

        session = ChaosSession(chaos_level, seed=args.seed, registry=registry)
        tier = session.tier
        level = session.engine.get_level()
        config = session.engine.get_config()
        print(
            "header "
            f"level={level} "
            f"preset={level_to_preset_label(level)} "
            f"frequency_ms={tier.frequency_ms if tier.frequency_ms is not None else '-'} "
            f"max_active={config.max_active_mutations} "
            f"categories={','.join(tier.allowed_categories) or '-'} "
            f"eligible={len(config.mutations)}"
        )

        if args.step_ms is None:
            session.advance_to(args.duration_ms)
        else:
            elapsed = 0
            while elapsed < args.duration_ms:
                elapsed = min(elapsed + args.step_ms, args.duration_ms)
                session.advance_to(elapsed)
                print(f"step time_ms={elapsed} active={','.join(session.active_ids()) or '-'}")

        active_at_end = session.active_ids()
        reverted = [] if args.no_teardown else session.teardown()

        for entry in session.trace:
            print(_format_trace_entry(entry))

        activations = sum(1 for entry in session.trace if entry["event"] == "activated")
        print(
            "summary "
            f"activations={activations} "
            f"max_active_observed={session.max_active_observed} "
            f"active_at_end={','.join(active_at_end) or '-'} "
            f"torn_down={','.join(reverted) or '-'}"
        )

    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
