## Pydantic schemas for plans, steps and resource links
import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ResourcesStatus(str, Enum):
    PENDING = "pending"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ResourceType(str, Enum):
    DOCUMENTATION = "documentation"
    TUTORIAL = "tutorial"
    VIDEO = "video"
    COURSE = "course"
    ARTICLE = "article"
    GITHUB = "github"
    TOOL = "tool"
    OTHER = "other"


_TYPE_ALIASES = {
    "code-repository": ResourceType.GITHUB,
    "code_repository": ResourceType.GITHUB,
    "repository": ResourceType.GITHUB,
    "repo": ResourceType.GITHUB,
    "docs": ResourceType.DOCUMENTATION,
}


def coerce_resource_type(value) -> ResourceType:
    if isinstance(value, ResourceType):
        return value
    key = str(value or "").strip().lower()
    if key in _TYPE_ALIASES:
        return _TYPE_ALIASES[key]
    try:
        return ResourceType(key)
    except ValueError:
        return ResourceType.OTHER


class CandidateResource(BaseModel):
    """Unverified title/url/type triple from the generator or the curated table."""

    title: str = Field(min_length=1, max_length=300)
    url: str = Field(min_length=1)
    type: ResourceType = ResourceType.OTHER

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v):
        return coerce_resource_type(v)

    @field_validator("title", "url")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ResourceLink(CandidateResource):
    model_config = ConfigDict(frozen=True)


class Step(BaseModel):
    id: uuid.UUID
    position: int = 0
    title: str
    description: str = ""
    estimated_time: str = ""
    resources: List[ResourceLink] = Field(default_factory=list)
    resources_status: ResourcesStatus = ResourcesStatus.PENDING
    resources_message: Optional[str] = None


class LearningPlan(BaseModel):
    id: uuid.UUID
    title: str
    category: str
    description: Optional[str] = None
    current_skill_level: Optional[str] = None
    learning_goal: Optional[str] = None
    target_skill_level: Optional[str] = None
    steps: List[Step] = Field(default_factory=list)
    resources_status: ResourcesStatus = ResourcesStatus.PENDING
    created_at: Optional[datetime] = None
    run_token: Optional[str] = Field(default=None, exclude=True)


class PlanSpec(BaseModel):
    """What a caller supplies to create a plan."""

    title: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    current_skill_level: str = "beginner"
    learning_goal: Optional[str] = None
    target_skill_level: str = "intermediate"


class PlanContext(BaseModel):
    """Plan-level context handed to the generator and the step enricher."""

    title: str
    category: str
    current_skill_level: Optional[str] = None
    target_skill_level: Optional[str] = None
    run_token: Optional[str] = None

    @classmethod
    def from_plan(cls, plan: LearningPlan) -> "PlanContext":
        return cls(
            title=plan.title,
            category=plan.category,
            current_skill_level=plan.current_skill_level,
            target_skill_level=plan.target_skill_level,
            run_token=plan.run_token,
        )


class StepDraft(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    estimated_time: str = Field(default="", validation_alias=AliasChoices("estimated_time", "estimatedTime"))

    @field_validator("description", "estimated_time", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else str(v)


class StepStatus(BaseModel):
    step_id: uuid.UUID
    step_status: ResourcesStatus
    resource_count: int


class PlanStatus(BaseModel):
    plan_id: uuid.UUID
    plan_status: ResourcesStatus
    steps: List[StepStatus] = Field(default_factory=list)
