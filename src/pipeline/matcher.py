"""Filter Engine: evaluates a FilterPlan against candidates.

Filter order:
  1. ExcludeCriteriaFilter: drops a candidate on the first matching exclude criterion
  2. IncludeCriteriaFilter: keeps a candidate only if every include criterion holds

Matching rules per field family:
  - title / location / full_name: normalized substring match in either direction,
    any listed term is enough
  - skills / languages / tags: exact, case-sensitive membership;
    include needs every listed value, exclude needs any
  - education_level / work_preference / visa_status: exact membership in the list
  - *_min / *_max: inclusive bounds, a missing bound is unconstrained
  - willing_to_relocate / open_to_contract: equality when specified
"""

import logging
import re
from collections.abc import Callable, Iterable, Sequence

from src.core.schemas import Candidate, FilterCriteria, FilterPlan

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset, order preserved.
Filter = Callable[[list[Candidate]], list[Candidate]]

# A criterion is a named predicate over a single candidate.
Criterion = tuple[str, Callable[[Candidate], bool]]

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")

_TEXT_FIELDS = ("title", "location", "full_name")
_SET_FIELDS = ("skills", "languages", "tags")
_ENUM_FIELDS = ("education_level", "work_preference", "visa_status")
_BOOL_FIELDS = ("willing_to_relocate", "open_to_contract")

# criteria prefix → candidate attribute
_RANGE_FIELDS = {
    "years_experience": "years_experience",
    "desired_salary": "desired_salary_usd",
    "availability_weeks": "availability_weeks",
    "notice_period_weeks": "notice_period_weeks",
}


def normalize_text(text: str) -> str:
    """Lower-case, drop everything outside [a-z0-9\\s], collapse whitespace."""
    cleaned = _NON_ALNUM.sub("", text.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def text_matches(terms: Iterable[str], value: str) -> bool:
    """True if any term contains, or is contained in, the candidate value."""
    target = normalize_text(value)
    if not target:
        return False
    for term in terms:
        needle = normalize_text(term)
        if needle and (needle in target or target in needle):
            return True
    return False


def _text_criterion(field: str, terms: list[str]) -> Criterion:
    return field, lambda c: text_matches(terms, getattr(c, field))


def _all_of_criterion(field: str, values: list[str]) -> Criterion:
    return field, lambda c: all(v in getattr(c, field) for v in values)


def _any_of_criterion(field: str, values: list[str]) -> Criterion:
    return field, lambda c: any(v in getattr(c, field) for v in values)


def _enum_criterion(field: str, values: list[str]) -> Criterion:
    allowed = set(values)
    return field, lambda c: getattr(c, field) in allowed


def _range_criterion(attr: str, low: float | None, high: float | None) -> Criterion:
    def check(c: Candidate) -> bool:
        value = getattr(c, attr)
        if low is not None and value < low:
            return False
        return not (high is not None and value > high)

    return attr, check


def _bool_criterion(field: str, expected: bool) -> Criterion:
    return field, lambda c: getattr(c, field) == expected


def build_criteria(criteria: FilterCriteria, *, exclude: bool = False) -> list[Criterion]:
    """Translate one criteria group into named predicates.

    The only difference between include and exclude groups is how set
    fields combine: include needs all values present, exclude any.
    """
    checks: list[Criterion] = []

    for field in _TEXT_FIELDS:
        terms = getattr(criteria, field)
        if terms:
            checks.append(_text_criterion(field, terms))

    for field in _SET_FIELDS:
        values = getattr(criteria, field)
        if values:
            make = _any_of_criterion if exclude else _all_of_criterion
            checks.append(make(field, values))

    for field in _ENUM_FIELDS:
        values = getattr(criteria, field)
        if values:
            checks.append(_enum_criterion(field, values))

    for prefix, attr in _RANGE_FIELDS.items():
        low = getattr(criteria, f"{prefix}_min")
        high = getattr(criteria, f"{prefix}_max")
        if low is not None or high is not None:
            checks.append(_range_criterion(attr, low, high))

    for field in _BOOL_FIELDS:
        expected = getattr(criteria, field)
        if expected is not None:
            checks.append(_bool_criterion(field, expected))

    return checks


class ExcludeCriteriaFilter:
    """Remove candidates matching ANY exclude criterion (short-circuit OR)."""

    def __init__(self, criteria: FilterCriteria) -> None:
        self._criteria = build_criteria(criteria, exclude=True)

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._criteria:
            return candidates
        result = [c for c in candidates if self._first_match(c) is None]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("ExcludeCriteriaFilter: removed %d candidates", excluded)
        return result

    def _first_match(self, candidate: Candidate) -> str | None:
        for name, check in self._criteria:
            if check(candidate):
                logger.debug("Excluding %s: %s in exclude list", candidate.id, name)
                return name
        return None


class IncludeCriteriaFilter:
    """Keep only candidates satisfying EVERY include criterion (AND across fields)."""

    def __init__(self, criteria: FilterCriteria) -> None:
        self._criteria = build_criteria(criteria)

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._criteria:
            return candidates
        result = [c for c in candidates if self._first_failure(c) is None]
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("IncludeCriteriaFilter: removed %d candidates", removed)
        return result

    def _first_failure(self, candidate: Candidate) -> str | None:
        for name, check in self._criteria:
            if not check(candidate):
                logger.debug("Excluding %s: %s mismatch", candidate.id, name)
                return name
        return None


def build_filters(plan: FilterPlan) -> list[Filter]:
    """Build the filter chain for a plan, exclusion first."""
    filters: list[Filter] = []
    if plan.exclude is not None:
        filters.append(ExcludeCriteriaFilter(plan.exclude))
    if plan.include is not None:
        filters.append(IncludeCriteriaFilter(plan.include))
    return filters


def run_filter_chain(
    candidates: list[Candidate],
    filters: list[Filter],
) -> list[Candidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result


def filter_candidates(candidates: Sequence[Candidate], plan: FilterPlan) -> list[Candidate]:
    """Return the candidates that pass the plan, in input order.

    An empty plan returns every candidate.
    """
    if plan.is_empty():
        return list(candidates)
    result = run_filter_chain(list(candidates), build_filters(plan))
    logger.info("Filtered %d → %d candidates", len(candidates), len(result))
    return result
