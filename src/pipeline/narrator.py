"""Narrator: streams a natural-language summary of a ranked result set."""

import logging
from collections.abc import AsyncIterator, Sequence

from src.core.schemas import AggregateStats, Candidate
from src.llm.base import LLMProvider
from src.pipeline.stats import aggregate_stats

logger = logging.getLogger(__name__)

NARRATION_SYSTEM_PROMPT = (
    "You are a recruitment assistant. Respond with a very brief, friendly summary "
    "of the candidate results.\n"
    "Format your response as markdown. Do NOT use a table.\n"
    "After the summary, list the top candidates as a simple numbered list, each on "
    "its own line, with their name, title, years of experience, and desired salary.\n"
    "Example format:\n"
    "### Found [count] candidates.\n"
    "Avg exp: [avg_experience] yrs | Avg salary: $[avg_salary] | Top skills: [top_skills]\n"
    "Top 5 candidates:\n"
    "1. Name (Title) - [Exp] yrs experience, $[Salary]/yr\n"
    "2. ...\n"
    "If there are fewer than 5 candidates, list as many as are available."
)


def build_narration_context(
    user_message: str,
    stats: AggregateStats,
    ranked: Sequence[Candidate],
    top_n: int = 5,
) -> str:
    """Assemble the provider prompt from statistics and the top of the ranking."""
    top = ranked[:top_n]
    lines = [
        f"Request: {user_message}",
        "",
        f"Found {stats.count} candidates.",
        (
            f"Avg exp: {stats.avg_experience} yrs | "
            f"Avg salary: ${stats.avg_salary:,} | "
            f"Top skills: {', '.join(stats.top_skills[:3]) or 'n/a'}"
        ),
        f"Locations: {', '.join(stats.locations) or 'n/a'}",
        "",
        f"Top {len(top)} candidates:",
        "",
    ]
    lines.extend(
        f"{i}. {c.full_name} ({c.title}) - {c.years_experience} yrs, "
        f"${c.desired_salary_usd:,}"
        for i, c in enumerate(top, start=1)
    )
    return "\n".join(lines)


async def narrate(
    user_message: str,
    ranked: Sequence[Candidate],
    provider: LLMProvider,
    *,
    model: str | None = None,
    temperature: float | None = 0.7,
    top_n: int = 5,
    top_skills: int = 10,
) -> AsyncIterator[str]:
    """Yield narration chunks in provider order, as soon as each arrives."""
    stats = aggregate_stats(ranked, top_skills=top_skills)
    context = build_narration_context(user_message, stats, ranked, top_n=top_n)
    logger.debug("Narration context:\n%s", context)

    async for chunk in provider.stream(
        context, model=model, system=NARRATION_SYSTEM_PROMPT, temperature=temperature,
    ):
        if chunk:
            yield chunk
