"""
DevCamper Backend — Course Request Schemas
============================================

What:  Validation rules for creating and updating courses.
Who:   POST /api/v1/bootcamps/{bootcamp_id}/courses and PUT /api/v1/courses/{id}.

The parent bootcamp comes from the URL and the owner from the bearer token,
so neither is accepted in the body.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

MinimumSkill = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    weeks: str = Field(min_length=1, max_length=50)
    tuition: int = Field(ge=0)
    minimum_skill: MinimumSkill
    scholarship_available: bool = False

    @field_validator("title", "weeks", mode="before")
    @classmethod
    def strip_text(cls, v):
        # weeks is free text but clients often send a bare number
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        return v.strip() if isinstance(v, str) else v


class CourseUpdate(BaseModel):
    """Partial update; fields left out keep their stored value."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[str] = Field(default=None, min_length=1, max_length=50)
    tuition: Optional[int] = Field(default=None, ge=0)
    minimum_skill: Optional[MinimumSkill] = None
    scholarship_available: Optional[bool] = None

    @field_validator("title", "weeks", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        return v.strip() if isinstance(v, str) else v
