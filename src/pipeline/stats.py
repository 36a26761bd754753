"""Aggregate statistics over a ranked result set."""

import math
from collections import Counter
from collections.abc import Sequence

from src.core.schemas import AggregateStats, Candidate


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def aggregate_stats(candidates: Sequence[Candidate], top_skills: int = 10) -> AggregateStats:
    """Summarize a candidate set for the narrator.

    Empty input yields an all-zero result rather than dividing by zero.
    Top skills are ordered by frequency, ties by first appearance.
    """
    if not candidates:
        return AggregateStats()

    count = len(candidates)
    avg_experience = sum(c.years_experience for c in candidates) / count
    avg_salary = sum(c.desired_salary_usd for c in candidates) / count

    skill_counts = Counter(skill for c in candidates for skill in c.skills)
    locations = list(dict.fromkeys(c.location for c in candidates))
    education = Counter(c.education_level for c in candidates)

    return AggregateStats(
        count=count,
        avg_experience=_round_half_up(avg_experience, 1),
        avg_salary=int(_round_half_up(avg_salary)),
        top_skills=[skill for skill, _ in skill_counts.most_common(top_skills)],
        locations=locations,
        education_breakdown=dict(education),
    )
