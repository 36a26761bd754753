"""Tests for aggregate statistics."""

from src.core.schemas import AggregateStats, Candidate
from src.pipeline.stats import aggregate_stats


def _candidate(
    id: str,
    *,
    years_experience: int = 5,
    desired_salary_usd: int = 100000,
    skills: tuple[str, ...] = (),
    location: str = "Austin, USA",
    education_level: str = "Bachelor's",
) -> Candidate:
    return Candidate(
        id=id,
        full_name=f"Candidate {id}",
        years_experience=years_experience,
        desired_salary_usd=desired_salary_usd,
        skills=skills,
        location=location,
        education_level=education_level,
    )


class TestAggregateStats:
    def test_empty_input_is_all_zero(self) -> None:
        assert aggregate_stats([]) == AggregateStats()

    def test_averages(self) -> None:
        stats = aggregate_stats([
            _candidate("1", years_experience=4, desired_salary_usd=100000),
            _candidate("2", years_experience=7, desired_salary_usd=150001),
        ])
        assert stats.count == 2
        assert stats.avg_experience == 5.5
        assert stats.avg_salary == 125001

    def test_experience_rounds_to_one_decimal(self) -> None:
        stats = aggregate_stats([
            _candidate("1", years_experience=1),
            _candidate("2", years_experience=1),
            _candidate("3", years_experience=2),
        ])
        assert stats.avg_experience == 1.3

    def test_salary_rounds_half_up(self) -> None:
        stats = aggregate_stats([
            _candidate("1", desired_salary_usd=1),
            _candidate("2", desired_salary_usd=2),
        ])
        assert stats.avg_salary == 2

    def test_top_skills_by_frequency(self) -> None:
        stats = aggregate_stats([
            _candidate("1", skills=("Go", "Python")),
            _candidate("2", skills=("Python", "AWS")),
            _candidate("3", skills=("AWS", "Python")),
        ])
        assert stats.top_skills == ["Python", "AWS", "Go"]

    def test_skill_ties_keep_first_seen(self) -> None:
        stats = aggregate_stats([_candidate("1", skills=("Rust", "Go", "C#"))])
        assert stats.top_skills == ["Rust", "Go", "C#"]

    def test_top_skills_limit(self) -> None:
        skills = tuple(f"S{i}" for i in range(15))
        stats = aggregate_stats([_candidate("1", skills=skills)], top_skills=10)
        assert len(stats.top_skills) == 10

    def test_locations_distinct_in_order(self) -> None:
        stats = aggregate_stats([
            _candidate("1", location="Denver, USA"),
            _candidate("2", location="Austin, USA"),
            _candidate("3", location="Denver, USA"),
        ])
        assert stats.locations == ["Denver, USA", "Austin, USA"]

    def test_education_breakdown(self) -> None:
        stats = aggregate_stats([
            _candidate("1", education_level="PhD"),
            _candidate("2", education_level="PhD"),
            _candidate("3", education_level="Bootcamp"),
        ])
        assert stats.education_breakdown == {"PhD": 2, "Bootcamp": 1}
