"""Two-phase join of records from sources that share no stable id.

Phase one looks the candidate up by exact code. Phase two compares normalized
names: containment scores ``len(shorter) / len(longer)``. Branches of one chain
("OO병원" vs "OO병원 분당") collide in phase two, so a tie between two candidates
is treated as no match and callers drop matches under their confidence threshold.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

EXACT_CONFIDENCE = 1.0

_NOISE = re.compile(r"[\s()\[\]·.,\-]+")
_SUFFIXES = ("응급의료센터", "응급실", "의료법인", "학교법인", "재단법인")


def normalize_name(name: str) -> str:
    compact = _NOISE.sub("", name or "")
    for suffix in _SUFFIXES:
        compact = compact.replace(suffix, "")
    return compact.lower()


def name_similarity(left: str, right: str) -> float:
    a = normalize_name(left)
    b = normalize_name(right)
    if not a or not b:
        return 0.0
    if a == b:
        return EXACT_CONFIDENCE
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if shorter in longer:
        return len(shorter) / len(longer)
    return 0.0


@dataclass(frozen=True)
class MatchResult(Generic[T]):
    item: T
    confidence: float
    method: str


def match_by_code_then_name(
    code: str | None,
    name: str,
    by_code: Mapping[str, T],
    candidates: Iterable[T],
    name_of: Callable[[T], str],
) -> MatchResult[T] | None:
    if code and code in by_code:
        return MatchResult(item=by_code[code], confidence=EXACT_CONFIDENCE, method="code")

    best: T | None = None
    best_score = 0.0
    tied = False
    for candidate in candidates:
        score = name_similarity(name, name_of(candidate))
        if score <= 0.0:
            continue
        if score > best_score:
            best, best_score, tied = candidate, score, False
        elif score == best_score:
            tied = True
    if best is None or tied:
        return None
    return MatchResult(item=best, confidence=best_score, method="name")
