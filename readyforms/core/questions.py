"""Question slot layout shared by templates and responses.

A template carries a fixed grid of question slots: four of each kind.
Slot ``("string", 1)`` maps to ``Template.custom_string1_state`` /
``Template.custom_string1_question`` and ``FormResponse.custom_string1_answer``.
The short key ``custom_string1`` is what ``question_order`` and
``scoring_criteria`` refer to.
"""
from __future__ import annotations

from typing import Iterator

QUESTION_KINDS: tuple[str, ...] = ("string", "text", "int", "checkbox")
SLOTS_PER_KIND = 4


def iter_slots() -> Iterator[tuple[str, int]]:
    for kind in QUESTION_KINDS:
        for n in range(1, SLOTS_PER_KIND + 1):
            yield kind, n


def slot_key(kind: str, n: int) -> str:
    return f"custom_{kind}{n}"


def state_attr(kind: str, n: int) -> str:
    return f"{slot_key(kind, n)}_state"


def answer_attr(kind: str, n: int) -> str:
    return f"{slot_key(kind, n)}_answer"


ALL_SLOT_KEYS: tuple[str, ...] = tuple(slot_key(k, n) for k, n in iter_slots())
STATE_ATTRS: tuple[str, ...] = tuple(state_attr(k, n) for k, n in iter_slots())
ANSWER_ATTRS: tuple[str, ...] = tuple(answer_attr(k, n) for k, n in iter_slots())


def parse_slot_key(key: str) -> tuple[str, int] | None:
    """``"custom_int3"`` -> ``("int", 3)``; None for anything else."""
    if not isinstance(key, str) or not key.startswith("custom_"):
        return None
    rest = key[len("custom_"):]
    for kind in QUESTION_KINDS:
        if rest.startswith(kind):
            tail = rest[len(kind):]
            if tail.isdigit() and 1 <= int(tail) <= SLOTS_PER_KIND:
                return kind, int(tail)
    return None


def enabled_slots(template) -> list[tuple[str, int]]:
    return [(k, n) for k, n in iter_slots() if bool(getattr(template, state_attr(k, n), False))]
