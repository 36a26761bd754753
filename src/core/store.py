"""Candidate Store: the read-only dataset snapshot shared by all queries.

The store is built once by an explicit startup step (CLI or app lifespan)
and handed to the pipeline. There is no module-level cache.
"""

import csv
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from src.core.schemas import Candidate

logger = logging.getLogger(__name__)

_LIST_FIELDS = ("skills", "languages", "citizenships", "tags")
_INT_FIELDS = (
    "years_experience",
    "availability_weeks",
    "notice_period_weeks",
    "desired_salary_usd",
    "remote_experience_years",
)
_BOOL_FIELDS = ("willing_to_relocate", "open_to_contract")


class CandidateStore:
    """Immutable snapshot of candidate records."""

    def __init__(self, candidates: Iterable[Candidate]) -> None:
        records = tuple(candidates)
        seen: set[str] = set()
        for c in records:
            if c.id in seen:
                msg = f"Duplicate candidate id: {c.id}"
                raise ValueError(msg)
            seen.add(c.id)
        self._candidates = records
        self._by_id = {c.id: c for c in records}

    @classmethod
    def from_csv(cls, path: str | Path) -> "CandidateStore":
        store = cls(load_candidates_csv(path))
        logger.info("Loaded %d candidates from %s", len(store), path)
        return store

    def all(self) -> tuple[Candidate, ...]:
        """Return the full candidate collection."""
        return self._candidates

    def get(self, candidate_id: str) -> Candidate | None:
        return self._by_id.get(candidate_id)

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)


def load_candidates_csv(path: str | Path) -> list[Candidate]:
    """Parse a candidates CSV file into Candidate records.

    List cells are ``;``-separated, boolean cells are Yes/No and
    empty numeric cells become 0.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Dataset file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        return [_row_to_candidate(row) for row in reader if _has_values(row)]


def _row_to_candidate(row: dict[str, str]) -> Candidate:
    data: dict[str, object] = {k: (v or "").strip() for k, v in row.items() if k}
    for name in _LIST_FIELDS:
        data[name] = _parse_list(str(data.get(name, "")))
    for name in _INT_FIELDS:
        data[name] = _parse_int(str(data.get(name, "")))
    for name in _BOOL_FIELDS:
        data[name] = _parse_bool(str(data.get(name, "")))
    if not data.get("last_active"):
        data["last_active"] = None
    return Candidate.model_validate(data)


def _has_values(row: dict[str, str]) -> bool:
    return any(isinstance(v, str) and v.strip() for v in row.values())


def _parse_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(";") if part.strip()]


def _parse_int(value: str) -> int:
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return 0


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("yes", "true")
