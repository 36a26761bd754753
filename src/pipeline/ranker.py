"""Ranking Engine: stable multi-key sort over candidates.

Each sort key resolves through a closed table of comparable fields. Keys
are applied left to right and the first non-zero comparison wins; ``desc``
negates that key's comparison only. Fully tied candidates keep their input
order (``sorted`` is stable).

A key naming a field outside the table (unknown, or list-valued like
``skills``) is skipped with a warning, so it behaves like a tie.
"""

import locale
import logging
import unicodedata
from collections.abc import Callable, Sequence
from enum import Enum
from functools import cmp_to_key
from typing import Any

from src.core.schemas import Candidate, RankingPlan, SortKey

logger = logging.getLogger(__name__)


class FieldKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"


COMPARABLE_FIELDS: dict[str, FieldKind] = {
    "id": FieldKind.TEXT,
    "full_name": FieldKind.TEXT,
    "title": FieldKind.TEXT,
    "location": FieldKind.TEXT,
    "timezone": FieldKind.TEXT,
    "education_level": FieldKind.TEXT,
    "degree_major": FieldKind.TEXT,
    "work_preference": FieldKind.TEXT,
    "visa_status": FieldKind.TEXT,
    "summary": FieldKind.TEXT,
    "linkedin_url": FieldKind.TEXT,
    "years_experience": FieldKind.NUMBER,
    "availability_weeks": FieldKind.NUMBER,
    "notice_period_weeks": FieldKind.NUMBER,
    "desired_salary_usd": FieldKind.NUMBER,
    "remote_experience_years": FieldKind.NUMBER,
    "willing_to_relocate": FieldKind.BOOLEAN,
    "open_to_contract": FieldKind.BOOLEAN,
    "last_active": FieldKind.TIMESTAMP,
}

Comparator = Callable[[Candidate, Candidate], int]


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def collation_key(text: str) -> str:
    """Casefolded text with accents removed ("Émile" → "emile")."""
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def compare_text(a: str, b: str) -> int:
    """Locale-aware comparison.

    Base letters decide first, so accented names sort with their
    unaccented neighbours even under the "C" collation locale. Accents
    and then case only break ties.
    """
    return (
        _sign(locale.strcoll(collation_key(a), collation_key(b)), 0)
        or _sign(locale.strcoll(a.casefold(), b.casefold()), 0)
        or _sign(locale.strcoll(a, b), 0)
    )


def compare_number(a: float, b: float) -> int:
    return _sign(a, b)


def compare_boolean(a: bool, b: bool) -> int:
    """False sorts before True."""
    return int(a) - int(b)


def compare_timestamp(a: Any, b: Any) -> int:
    """Missing timestamps sort before any real one."""
    if a is None or b is None:
        return _sign(a is not None, b is not None)
    return _sign(a, b)


_COMPARE: dict[FieldKind, Callable[[Any, Any], int]] = {
    FieldKind.TEXT: compare_text,
    FieldKind.NUMBER: compare_number,
    FieldKind.BOOLEAN: compare_boolean,
    FieldKind.TIMESTAMP: compare_timestamp,
}


def unresolved_sort_fields(plan: RankingPlan) -> list[str]:
    """Return the plan's field names that cannot be compared."""
    return [key.field for key in plan.keys if key.field not in COMPARABLE_FIELDS]


def _key_comparator(key: SortKey) -> Comparator | None:
    kind = COMPARABLE_FIELDS.get(key.field)
    if kind is None:
        return None
    compare = _COMPARE[kind]
    field = key.field
    sign = -1 if key.direction == "desc" else 1

    def comparator(a: Candidate, b: Candidate) -> int:
        return sign * compare(getattr(a, field), getattr(b, field))

    return comparator


def build_comparator(plan: RankingPlan) -> Comparator:
    """Chain the plan's keys into a single comparator."""
    steps: list[Comparator] = []
    for key in plan.keys:
        step = _key_comparator(key)
        if step is None:
            logger.warning(
                "Ranking field '%s' is not comparable, skipping this key", key.field,
            )
            continue
        steps.append(step)

    def comparator(a: Candidate, b: Candidate) -> int:
        for step in steps:
            result = step(a, b)
            if result:
                return result
        return 0

    return comparator


def rank_candidates(candidates: Sequence[Candidate], plan: RankingPlan) -> list[Candidate]:
    """Return a new list ordered by the plan; the input is left untouched."""
    ranked = sorted(candidates, key=cmp_to_key(build_comparator(plan)))
    logger.info(
        "Ranked %d candidates by %s",
        len(ranked),
        ", ".join(f"{k.field} {k.direction}" for k in plan.keys),
    )
    return ranked
