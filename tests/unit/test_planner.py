"""Tests for plan generation and response parsing."""

import json
from typing import Any

import pytest

from src.core.schemas import QueryPlans
from src.pipeline.planner import (
    DEFAULT_INCLUDE,
    PLAN_SYSTEM_PROMPT,
    PlanParseError,
    generate_plan,
    parse_plan_response,
)

SAMPLE_PLAN: dict[str, Any] = {
    "filter": {
        "include": {"title": ["Frontend Engineer"], "location": ["USA"]},
        "exclude": {"work_preference": ["Onsite"]},
    },
    "rank": {
        "primary": {"field": "years_experience", "direction": "desc"},
        "tie_breakers": [{"field": "desired_salary_usd", "direction": "asc"}],
    },
}


# ---------------------------------------------------------------------------
# parse_plan_response
# ---------------------------------------------------------------------------


class TestParsePlanResponse:
    def test_plain_json(self) -> None:
        plans = parse_plan_response(json.dumps(SAMPLE_PLAN))
        assert isinstance(plans, QueryPlans)
        assert plans.filter.include is not None
        assert plans.filter.include.title == ["Frontend Engineer"]
        assert plans.rank.primary.field == "years_experience"
        assert plans.rank.primary.direction == "desc"
        assert [k.field for k in plans.rank.tie_breakers] == ["desired_salary_usd"]

    def test_fenced_json_matches_plain(self) -> None:
        raw = json.dumps(SAMPLE_PLAN, indent=2)
        assert parse_plan_response(f"```json\n{raw}\n```") == parse_plan_response(raw)

    def test_bare_fence(self) -> None:
        raw = json.dumps(SAMPLE_PLAN)
        assert parse_plan_response(f"```\n{raw}\n```") == parse_plan_response(raw)

    def test_surrounding_whitespace(self) -> None:
        raw = json.dumps(SAMPLE_PLAN)
        assert parse_plan_response(f"\n\n  {raw}  \n") == parse_plan_response(raw)

    def test_missing_include_gets_default(self) -> None:
        data = {"filter": {"exclude": {"title": ["QA"]}}, "rank": SAMPLE_PLAN["rank"]}
        plans = parse_plan_response(json.dumps(data))
        assert plans.filter.include is not None
        assert plans.filter.include.years_experience_min == DEFAULT_INCLUDE["years_experience_min"]
        assert plans.filter.include.desired_salary_min == DEFAULT_INCLUDE["desired_salary_min"]
        assert plans.filter.exclude is not None
        assert plans.filter.exclude.title == ["QA"]

    def test_empty_include_gets_default(self) -> None:
        data = {"filter": {"include": {"skills": []}}, "rank": SAMPLE_PLAN["rank"]}
        plans = parse_plan_response(json.dumps(data))
        assert plans.filter.include is not None
        assert plans.filter.include.years_experience_min == 0

    def test_missing_filter_gets_default(self) -> None:
        plans = parse_plan_response(json.dumps({"rank": SAMPLE_PLAN["rank"]}))
        assert plans.filter.include is not None
        assert not plans.filter.include.is_empty()

    def test_null_filter_gets_default(self) -> None:
        plans = parse_plan_response(json.dumps({"filter": None, "rank": SAMPLE_PLAN["rank"]}))
        assert plans.filter.exclude is None
        assert plans.filter.include is not None
        assert plans.filter.include.years_experience_min == 0
        assert plans.filter.include.desired_salary_min == 0

    def test_unknown_filter_keys_ignored(self) -> None:
        data = {
            "filter": {"include": {"skills": ["Go"], "zodiac": ["Leo"]}},
            "rank": SAMPLE_PLAN["rank"],
        }
        plans = parse_plan_response(json.dumps(data))
        assert plans.filter.include is not None
        assert plans.filter.include.skills == ["Go"]

    def test_empty_text(self) -> None:
        with pytest.raises(PlanParseError, match="Empty plan response"):
            parse_plan_response("   ")

    def test_invalid_json(self) -> None:
        with pytest.raises(PlanParseError, match="Failed to parse"):
            parse_plan_response("Here are candidates you might like!")

    def test_non_object_json(self) -> None:
        with pytest.raises(PlanParseError, match="JSON object"):
            parse_plan_response("[1, 2, 3]")

    def test_missing_rank(self) -> None:
        with pytest.raises(PlanParseError, match="failed validation"):
            parse_plan_response(json.dumps({"filter": {}}))

    def test_bad_direction(self) -> None:
        data = {"rank": {"primary": {"field": "title", "direction": "up"}}}
        with pytest.raises(PlanParseError):
            parse_plan_response(json.dumps(data))

    def test_plan_parse_error_is_value_error(self) -> None:
        assert issubclass(PlanParseError, ValueError)


# ---------------------------------------------------------------------------
# generate_plan
# ---------------------------------------------------------------------------


class TestGeneratePlan:
    async def test_calls_provider_with_plan_prompt(self, fake_provider: Any) -> None:
        provider = fake_provider(plan_text=json.dumps(SAMPLE_PLAN))
        plans = await generate_plan("senior frontend devs in the US", provider, temperature=0.1)
        assert plans.rank.primary.field == "years_experience"
        [call] = provider.complete_calls
        assert call["prompt"] == "senior frontend devs in the US"
        assert call["system"] == PLAN_SYSTEM_PROMPT
        assert call["temperature"] == 0.1

    async def test_model_passed_through(self, fake_provider: Any) -> None:
        provider = fake_provider(plan_text=json.dumps(SAMPLE_PLAN))
        await generate_plan("anyone", provider, model="gpt-4o")
        assert provider.complete_calls[0]["model"] == "gpt-4o"

    async def test_unparseable_response_raises(self, fake_provider: Any) -> None:
        provider = fake_provider(plan_text="not json at all")
        with pytest.raises(PlanParseError):
            await generate_plan("anyone", provider)

    async def test_provider_error_propagates(self, fake_provider: Any) -> None:
        provider = fake_provider(plan_error=ConnectionError("provider down"))
        with pytest.raises(ConnectionError, match="provider down"):
            await generate_plan("anyone", provider)

    async def test_unknown_rank_field_kept(self, fake_provider: Any) -> None:
        data = {"rank": {"primary": {"field": "shoe_size", "direction": "asc"}}}
        provider = fake_provider(plan_text=json.dumps(data))
        plans = await generate_plan("anyone", provider)
        assert plans.rank.primary.field == "shoe_size"
