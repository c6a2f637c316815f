from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from readyforms.core.questions import answer_attr, enabled_slots, slot_key


@dataclass(frozen=True)
class QuizScore:
    score: int
    total_possible_points: int


def _points(rule: Mapping[str, Any]) -> int:
    try:
        return max(0, int(rule.get("points") or 0))
    except (TypeError, ValueError):
        return 0


def answer_matches(kind: str, given: Any, expected: Any) -> bool:
    if given is None or expected is None:
        return False
    if kind in ("string", "text"):
        return str(given).strip().lower() == str(expected).strip().lower()
    if kind == "int":
        try:
            return int(given) == int(expected)
        except (TypeError, ValueError):
            return False
    if kind == "checkbox":
        if isinstance(expected, str):
            expected = expected.strip().lower() in {"true", "1", "yes"}
        return bool(given) is bool(expected)
    return False


def score_answers(template, answers: Mapping[str, Any]) -> QuizScore | None:
    """Score ``answers`` (keyed by answer attribute) against a quiz template.

    Only enabled questions listed in ``scoring_criteria`` count. Returns None
    for templates that are not quizzes.
    """
    if not template.is_quiz:
        return None

    criteria = template.scoring_criteria or {}
    earned = 0
    total = 0
    for kind, n in enabled_slots(template):
        rule = criteria.get(slot_key(kind, n))
        if not isinstance(rule, Mapping):
            continue
        points = _points(rule)
        total += points
        if answer_matches(kind, answers.get(answer_attr(kind, n)), rule.get("answer")):
            earned += points
    return QuizScore(score=earned, total_possible_points=total)
