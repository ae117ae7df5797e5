# promptiq/scoring.py
"""
Heuristic prompt quality score.

Four sub-scores worth up to 2.5 each (structure, clarity, examples,
specificity) are summed into a 0..10 total. Each tier below the top one
contributes improvement suggestions; only the first three are kept, in
sub-score order. The dashboard renders these numbers as-is, so the rounding
and the suggestion order must not change.
"""
from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, field
from typing import List

TOP = 2.5
MID = 1.5
LOW = 0.5

MAX_SUGGESTIONS = 3

_EXAMPLE_RX = re.compile(r"example|e\.g\.|for instance|such as", re.IGNORECASE)
_WHITESPACE_RX = re.compile(r"\s+")

ROLE_MARKERS = ("role:", "act as", "you are")
TASK_MARKERS = ("task:", "objective:", "goal:")
CONSTRAINT_MARKERS = ("constraint", "limitation", "requirement")
FORMAT_MARKERS = ("format:", "output:", "structure:")


@dataclass
class QualityBreakdown:
    structure: float
    clarity: float
    examples: float
    specificity: float
    total: float
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _round1(x: float) -> float:
    # half-up, matching the dashboard's Math.round(x * 10) / 10
    return math.floor(x * 10 + 0.5) / 10


def word_count(text: str) -> int:
    """Pieces left after splitting on whitespace runs; leading/trailing blanks count as pieces."""
    return len(_WHITESPACE_RX.split(text))


def _structure(text: str, suggestions: List[str]) -> float:
    if "##" in text or "**" in text:
        return TOP
    if "#" in text or "*" in text:
        suggestions.append("Add more clear section headers for better structure")
        return MID
    suggestions.append("Use markdown headers to organize sections")
    return LOW


def _clarity(lower: str, suggestions: List[str]) -> float:
    has_role = any(m in lower for m in ROLE_MARKERS)
    has_task = any(m in lower for m in TASK_MARKERS)

    if has_role and has_task:
        return TOP
    if has_role or has_task:
        if not has_role:
            suggestions.append("Define a clear role for the AI")
        if not has_task:
            suggestions.append("State the objective more explicitly")
        return MID
    suggestions.append("Add role definition and clear objectives")
    return LOW


def _examples(text: str, suggestions: List[str]) -> float:
    count = len(_EXAMPLE_RX.findall(text))
    if count >= 2:
        return TOP
    if count == 1:
        suggestions.append("Add more concrete examples")
        return MID
    suggestions.append("Include relevant examples to illustrate expectations")
    return LOW


def _specificity(text: str, lower: str, suggestions: List[str]) -> float:
    words = word_count(text)
    has_constraints = any(m in lower for m in CONSTRAINT_MARKERS)
    has_format = any(m in lower for m in FORMAT_MARKERS)

    if words >= 400 and has_constraints and has_format:
        return TOP
    if words >= 300 or has_constraints or has_format:
        if words < 400:
            suggestions.append("Add more detail and specificity")
        if not has_constraints:
            suggestions.append("Define constraints and limitations")
        if not has_format:
            suggestions.append("Specify the desired output format")
        return MID
    suggestions.append(
        "Significantly expand with more details, constraints, and format specifications"
    )
    return LOW


def score(text: str) -> QualityBreakdown:
    text = text or ""
    lower = text.lower()
    suggestions: List[str] = []

    structure = _structure(text, suggestions)
    clarity = _clarity(lower, suggestions)
    examples = _examples(text, suggestions)
    specificity = _specificity(text, lower, suggestions)

    total = min(_round1(structure + clarity + examples + specificity), 10.0)

    return QualityBreakdown(
        structure=_round1(structure),
        clarity=_round1(clarity),
        examples=_round1(examples),
        specificity=_round1(specificity),
        total=total,
        suggestions=suggestions[:MAX_SUGGESTIONS],
    )
