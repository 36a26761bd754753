"""Core data models for the candidate query pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Candidate(BaseModel):
    """A candidate record from the dataset.

    Frozen: loaded once at startup and shared read-only by every query.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    title: str = ""
    location: str = ""
    timezone: str = ""
    years_experience: int = Field(default=0, ge=0)
    skills: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    education_level: str = ""
    degree_major: str = ""
    availability_weeks: int = Field(default=0, ge=0)
    willing_to_relocate: bool = False
    work_preference: Literal["Remote", "Hybrid", "Onsite"] = "Remote"
    notice_period_weeks: int = Field(default=0, ge=0)
    desired_salary_usd: int = Field(default=0, ge=0)
    open_to_contract: bool = False
    remote_experience_years: int = Field(default=0, ge=0)
    visa_status: str = ""
    citizenships: tuple[str, ...] = ()
    summary: str = ""
    tags: tuple[str, ...] = ()
    last_active: datetime | None = None
    linkedin_url: str = ""


class FilterCriteria(BaseModel):
    """One criteria group of a filter plan (either ``include`` or ``exclude``).

    Every field is optional; ``None`` or an empty list means "don't care".
    Unknown keys from the planner are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    # Normalized substring matching
    title: list[str] | None = None
    location: list[str] | None = None
    full_name: list[str] | None = None

    # Exact set membership
    skills: list[str] | None = None
    languages: list[str] | None = None
    tags: list[str] | None = None

    # Exact enum membership
    education_level: list[str] | None = None
    work_preference: list[str] | None = None
    visa_status: list[str] | None = None

    # Inclusive numeric bounds
    years_experience_min: float | None = None
    years_experience_max: float | None = None
    desired_salary_min: float | None = None
    desired_salary_max: float | None = None
    availability_weeks_min: float | None = None
    availability_weeks_max: float | None = None
    notice_period_weeks_min: float | None = None
    notice_period_weeks_max: float | None = None

    # Strict equality when present
    willing_to_relocate: bool | None = None
    open_to_contract: bool | None = None

    def is_empty(self) -> bool:
        """True when no criterion in this group constrains anything."""
        return not any(
            value not in (None, []) for value in self.model_dump().values()
        )


class FilterPlan(BaseModel):
    """Include/exclude criteria evaluated against every candidate."""

    include: FilterCriteria | None = None
    exclude: FilterCriteria | None = None

    def is_empty(self) -> bool:
        return all(group is None or group.is_empty() for group in (self.include, self.exclude))


class SortKey(BaseModel):
    """A single ranking key: candidate field name plus direction."""

    field: str
    direction: Literal["asc", "desc"] = "asc"

    @field_validator("direction", mode="before")
    @classmethod
    def direction_lowercase(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.lower().strip()
        return v


class RankingPlan(BaseModel):
    """Primary sort key plus ordered tie-breakers."""

    primary: SortKey
    tie_breakers: list[SortKey] = Field(default_factory=list)

    @field_validator("tie_breakers", mode="before")
    @classmethod
    def tie_breakers_default(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def keys(self) -> list[SortKey]:
        """All keys in the order they are applied."""
        return [self.primary, *self.tie_breakers]


class QueryPlans(BaseModel):
    """The {filter, rank} pair produced by the planner."""

    filter: FilterPlan = Field(default_factory=FilterPlan)
    rank: RankingPlan

    @field_validator("filter", mode="before")
    @classmethod
    def filter_default(cls, v: Any) -> Any:
        return {} if v is None else v


class AggregateStats(BaseModel):
    """Summary statistics over a ranked result set."""

    count: int = 0
    avg_experience: float = 0
    avg_salary: int = 0
    top_skills: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    education_breakdown: dict[str, int] = Field(default_factory=dict)


class Phase(str, Enum):
    """Pipeline phase carried by every event on the wire."""

    THINK = "think"
    ACT1 = "act1"
    ACT2 = "act2"
    SPEAK = "speak"
    ERROR = "error"


class PhaseEvent(BaseModel):
    """One line of the newline-delimited progress protocol."""

    phase: Phase
    message: str | None = None
    data: dict[str, Any] | None = None


class ChatMessage(BaseModel):
    """A single conversation turn."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """A conversation whose last entry is the new user utterance."""

    messages: list[ChatMessage]

    @field_validator("messages")
    @classmethod
    def last_message_from_user(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        if not v:
            msg = "messages must not be empty"
            raise ValueError(msg)
        if v[-1].role != "user":
            msg = "last message must come from the user"
            raise ValueError(msg)
        if not v[-1].content.strip():
            msg = "last message must not be blank"
            raise ValueError(msg)
        return v

    @property
    def utterance(self) -> str:
        """The new user message that drives the query."""
        return self.messages[-1].content.strip()
