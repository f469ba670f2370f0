"""Advisory validators over a finished specification.

Both validators are pure: they never raise on findings and never alter the
specification. ``valid`` is False only when warnings exist; suggestions are
non-blocking.

Meaningful play asks whether every action is discernible (the player can
perceive its result) and integrated (it feeds score and progression). The
difficulty check guards against curves that start too hard, stay flat, climb
without relief or jump in one step.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from seedforge.gen.spec import GameSpecification, RuleDef, SystemDef

VERB_SYSTEM_MAP: dict[str, tuple[str, ...]] = {
    "jump": ("physics", "movement", "jump"),
    "shoot": ("shooting", "projectile", "combat"),
    "collect": ("collection", "pickup", "collectible"),
    "dodge": ("dodge", "movement", "dash"),
    "build": ("building", "placement", "construction"),
    "explore": ("exploration", "movement", "discovery"),
    "push": ("physics", "movement", "pushing"),
    "activate": ("interaction", "trigger", "activation"),
    "craft": ("crafting", "inventory", "combination"),
    "defend": ("defense", "shielding", "combat"),
    "dash": ("dash", "movement", "speed"),
}

VISIBLE_KEYWORDS = (
    "particle",
    "flash",
    "sound",
    "animation",
    "shake",
    "color",
    "glow",
    "spawn",
    "destroy",
    "score",
    "text",
)
PROGRESSION_KEYWORDS = ("level", "unlock", "progress", "advance", "next", "complete", "win", "stage")

MAX_INITIAL_DIFFICULTY = 0.4
MIN_CURVE_RANGE = 0.15
MAX_MONOTONE_RUN = 5
MAX_SINGLE_STEP = 0.35
BREATHING_ROOM_MIN_POINTS = 5


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "valid": self.valid,
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }


@dataclass
class _Findings:
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def result(self) -> ValidationResult:
        return ValidationResult(
            valid=not self.warnings,
            warnings=tuple(self.warnings),
            suggestions=tuple(self.suggestions),
        )


def has_system_for_verb(systems: Sequence[SystemDef], verb: str) -> bool:
    expected = VERB_SYSTEM_MAP.get(verb, ())
    return any(system.system_type in expected for system in systems)


def _has_visible_effect(rules: Sequence[RuleDef]) -> bool:
    return any(keyword in rule.effect.lower() for rule in rules for keyword in VISIBLE_KEYWORDS)


def _has_scoring_for_verbs(rules: Sequence[RuleDef], verbs: Sequence[str]) -> bool:
    for rule in rules:
        if "score" not in rule.effect.lower():
            continue
        trigger = rule.trigger.lower()
        action = rule.action.lower()
        if any(verb in trigger or verb in action for verb in verbs):
            return True
    return False


def _has_progression_link(rules: Sequence[RuleDef]) -> bool:
    for rule in rules:
        effect = rule.effect.lower()
        action = rule.action.lower()
        if any(keyword in effect or keyword in action for keyword in PROGRESSION_KEYWORDS):
            return True
    return False


def validate_meaningful_play(spec: GameSpecification) -> ValidationResult:
    findings = _Findings()

    for verb in spec.verbs:
        if not has_system_for_verb(spec.systems, verb):
            findings.warnings.append(
                f'Verb "{verb}" has no corresponding system. '
                "The player will press the button and nothing will happen."
            )

    if spec.rules and not _has_visible_effect(spec.rules):
        findings.suggestions.append(
            "None of the rules produce an obviously visible effect (particle, flash, score change). "
            "Consider adding visual feedback so the player can perceive rule outcomes."
        )

    for verb in spec.verbs:
        if not any(rule.mentions(verb) for rule in spec.rules):
            findings.suggestions.append(
                f'No rule references the "{verb}" verb. '
                "The action may feel disconnected from the game world."
            )

    if not _has_scoring_for_verbs(spec.rules, spec.verbs):
        findings.warnings.append(
            "No scoring rule is linked to any player verb. "
            "Actions will feel pointless because they do not affect the score."
        )

    if not _has_progression_link(spec.rules):
        findings.suggestions.append(
            "No rule connects to a progression mechanic (level advance, unlock, etc.). "
            "The game may lack a sense of forward motion."
        )

    if not spec.feedback_loops:
        findings.suggestions.append(
            "No feedback loops defined. Adding at least one positive and one negative loop "
            "improves the feeling that actions have consequences."
        )

    if not spec.narrative.events:
        findings.suggestions.append(
            "No narrative events. Even minimal story beats help the player feel that their actions matter."
        )

    return findings.result()


def curve_range(curve: Sequence[float]) -> float:
    if not curve:
        return 0.0
    return max(curve) - min(curve)


def longest_increasing_run(curve: Sequence[float]) -> int:
    """Length, in points, of the longest strictly increasing stretch."""
    if len(curve) < 2:
        return 0
    longest = 1
    current = 1
    for previous, value in zip(curve, curve[1:]):
        if value > previous:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def max_step_increase(curve: Sequence[float]) -> float:
    steps = [value - previous for previous, value in zip(curve, curve[1:])]
    return max([0.0] + steps)


def has_breathing_room(curve: Sequence[float]) -> bool:
    return any(value < previous for previous, value in zip(curve, curve[1:]))


def validate_curve(curve: Sequence[float]) -> ValidationResult:
    findings = _Findings()
    if not curve:
        findings.warnings.append("Difficulty curve is empty. The game has no difficulty progression at all.")
        return findings.result()

    if len(curve) < 3:
        findings.suggestions.append(
            f"Difficulty curve has only {len(curve)} point(s). "
            "Consider at least 5 points for a meaningful progression arc."
        )

    if curve[0] > MAX_INITIAL_DIFFICULTY:
        findings.warnings.append(
            f"Initial difficulty is {curve[0]:.2f}, which exceeds the accessibility threshold of "
            f"{MAX_INITIAL_DIFFICULTY}. New players may feel overwhelmed."
        )

    spread = curve_range(curve)
    if spread < MIN_CURVE_RANGE:
        findings.warnings.append(
            f"Difficulty curve range is only {spread:.2f}. "
            f"A range below {MIN_CURVE_RANGE} feels flat and boring."
        )

    run = longest_increasing_run(curve)
    if run > MAX_MONOTONE_RUN:
        findings.suggestions.append(
            f"The curve has a run of {run} consecutively increasing levels. "
            "Consider inserting a dip or plateau to let the player recover."
        )

    if len(curve) >= BREATHING_ROOM_MIN_POINTS and not has_breathing_room(curve):
        findings.warnings.append(
            'The difficulty curve never decreases. Players need occasional "breathing rooms" '
            "where pressure eases before climbing again."
        )

    steepest = max_step_increase(curve)
    if steepest > MAX_SINGLE_STEP:
        findings.suggestions.append(
            f"The largest single-step difficulty increase is {steepest:.2f}. "
            f"Steps above {MAX_SINGLE_STEP} can feel like hitting a wall."
        )

    return findings.result()


def validate_difficulty(spec: GameSpecification) -> ValidationResult:
    return validate_curve(spec.difficulty.curve)
