"""Pydantic contracts for every request and response body the client touches.

The API speaks camelCase JSON. Models use snake_case attributes with camelCase
aliases, and accept either form on input. Unknown response fields are ignored.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # Request body form: camelCase keys, ISO datetimes, unset optionals dropped.
    def to_payload(self):
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class User(ApiModel):
    id: str
    email: str


class AuthResponse(ApiModel):
    access_token: str
    user: User


class WorkType(ApiModel):
    id: str
    project_id: str
    name: str
    color: str = "#9ca3af"
    description: Optional[str] = None
    status: Literal["active", "archived"] = "active"
    time_goal_ms: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Project(ApiModel):
    id: str
    user_id: Optional[str] = None
    name: str
    color: str = "#6366f1"
    description: Optional[str] = None
    status: Literal["active", "archived"] = "active"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    work_types: Optional[list[WorkType]] = None


class TimeEntry(ApiModel):
    id: str
    project_id: str
    work_type_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    duration_ms: int
    description: Optional[str] = None
    time_limit_ms: Optional[int] = None
    created_at: Optional[str] = None
    project: Optional[Project] = None
    work_type: Optional[WorkType] = None


class TimeEntryCreate(ApiModel):
    project_id: str
    work_type_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    duration_ms: int = Field(ge=0)
    description: Optional[str] = None
    time_limit_ms: Optional[int] = None

    @model_validator(mode="after")
    def _check_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class UserSettings(ApiModel):
    pomodoro_work_time: int = 25
    pomodoro_rest_time: int = 5
    pomodoro_long_rest_time: int = 15
    auto_start: bool = False
    round_times: str = "off"
    language: str = "en"
    data_retention_period: int = 3
    active_project_id: Optional[str] = None


class SummaryRef(ApiModel):
    id: str
    name: str
    color: str


class WorkTypeSummary(ApiModel):
    work_type: SummaryRef
    duration: int
    percentage: int
    entries_count: int


class ProjectSummary(ApiModel):
    project: SummaryRef
    total_duration: int
    percentage: int
    work_types: list[WorkTypeSummary]
    entries_count: int


class Report(ApiModel):
    start_date: datetime
    end_date: datetime
    total_duration: int
    entries: list[TimeEntry] = Field(default_factory=list)
    project_summaries: list[ProjectSummary] = Field(default_factory=list)
