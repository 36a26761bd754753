"""Plan Generator: turns a user utterance into filter and ranking plans."""

import json
import logging

from pydantic import ValidationError

from src.core.schemas import FilterCriteria, QueryPlans
from src.llm.base import LLMProvider, strip_code_fence
from src.pipeline.ranker import unresolved_sort_fields

logger = logging.getLogger(__name__)

PLAN_SYSTEM_PROMPT = (
    "You are a recruitment assistant that analyzes candidate data.\n"
    "Respond ONLY with a valid JSON object: no commentary, no markdown, no code "
    "block, no explanation.\n\n"
    "Format:\n"
    '{"filter": {"include": {...}, "exclude": {...}}, '
    '"rank": {"primary": {"field": "<field>", "direction": "asc"|"desc"}, '
    '"tie_breakers": [{"field": "<field>", "direction": "asc"|"desc"}]}}\n\n'
    "Available candidate fields: id, full_name, title, location, timezone, "
    "years_experience, skills, languages, education_level, degree_major, "
    "availability_weeks, willing_to_relocate, work_preference, notice_period_weeks, "
    "desired_salary_usd, open_to_contract, remote_experience_years, visa_status, "
    "citizenships, summary, tags, last_active, linkedin_url\n\n"
    "Use exact values from the database. Common values:\n"
    '- Titles: "Backend Engineer", "Frontend Engineer", "DevOps Engineer", '
    '"QA Engineer", "Data Scientist", "Machine Learning Engineer", '
    '"Cloud Architect", "Product Engineer", "Full-Stack Developer", "Mobile Developer"\n'
    '- Work preferences: "Remote", "Hybrid", "Onsite"\n'
    '- Education levels: "PhD", "Master\'s", "Bachelor\'s", "Bootcamp"\n'
    '- Visa status: "Citizen", "Work Visa", "Needs Sponsorship", "Permanent Resident"\n'
    '- Skills: "JavaScript", "Python", "Java", "React", "Node.js", "AWS", "Docker", '
    '"TypeScript", "Go", "Rust", "C#", "Angular", "Vue", "Spring", "FastAPI", '
    '"Express", "Next.js", "GraphQL", "PostgreSQL", "MongoDB", "Redis", '
    '"Kubernetes", "Azure", "GCP"\n'
    '- Languages: "English", "Spanish", "French", "Hindi", "Arabic", "Portuguese", '
    '"German", "Japanese", "Mandarin"\n'
    '- Tags: "backend", "frontend", "fullstack", "devops", "qa", "data", '
    '"machine-learning", "cloud", "mobile"\n\n'
    "Both include and exclude accept:\n"
    "- title, location, full_name: arrays of strings (partial matches allowed)\n"
    "- skills, languages, tags: arrays of exact values; in include, ALL listed "
    "values are required\n"
    "- education_level, work_preference, visa_status: arrays of exact values\n"
    "- years_experience_min / years_experience_max (number)\n"
    "- desired_salary_min / desired_salary_max (number)\n"
    "- availability_weeks_min / availability_weeks_max (number)\n"
    "- notice_period_weeks_min / notice_period_weeks_max (number)\n"
    "- willing_to_relocate, open_to_contract (boolean)\n\n"
    "Always put specific criteria in include. If the user asks for everyone, use "
    'broad criteria such as {"years_experience_min": 0, "desired_salary_min": 0}.\n'
    "Common ranking fields: years_experience, desired_salary_usd, last_active. "
    "tie_breakers is optional."
)

# Substituted when the planner returns no include criteria.
DEFAULT_INCLUDE = {"years_experience_min": 0, "desired_salary_min": 0}


class PlanParseError(ValueError):
    """The provider response could not be turned into QueryPlans."""


def parse_plan_response(raw_text: str) -> QueryPlans:
    """Parse provider text into QueryPlans.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON. Missing
    or empty include criteria are replaced by DEFAULT_INCLUDE; any exclude
    criteria are kept.

    Raises:
        PlanParseError: Empty text, invalid JSON, or a shape that fails validation.
    """
    cleaned = strip_code_fence(raw_text)
    if not cleaned:
        msg = "Empty plan response"
        raise PlanParseError(msg)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse plan response as JSON: {e}"
        raise PlanParseError(msg) from e

    if not isinstance(data, dict):
        msg = f"Plan response must be a JSON object, got {type(data).__name__}"
        raise PlanParseError(msg)

    try:
        plans = QueryPlans.model_validate(data)
    except ValidationError as e:
        msg = f"Plan response failed validation: {e}"
        raise PlanParseError(msg) from e

    if plans.filter.include is None or plans.filter.include.is_empty():
        logger.warning("No include criteria generated, using default filters")
        plans.filter.include = FilterCriteria.model_validate(DEFAULT_INCLUDE)

    return plans


async def generate_plan(
    user_message: str,
    provider: LLMProvider,
    *,
    model: str | None = None,
    temperature: float | None = 0.1,
) -> QueryPlans:
    """Ask the provider for a plan and parse it.

    Provider errors propagate unchanged; parse failures raise PlanParseError.
    """
    raw = await provider.complete(
        user_message, model=model, system=PLAN_SYSTEM_PROMPT, temperature=temperature,
    )
    try:
        plans = parse_plan_response(raw)
    except PlanParseError:
        logger.error("Unparseable plan response: %r", raw[:500])
        raise

    ignored = unresolved_sort_fields(plans.rank)
    if ignored:
        logger.warning("Ranking plan names non-comparable fields: %s", ", ".join(ignored))

    logger.debug("Parsed plans: %s", plans.model_dump_json(exclude_none=True))
    return plans
