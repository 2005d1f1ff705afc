"""
DevCamper Backend — Bootcamp Request Schemas
==============================================

What:  Validation rules for creating and updating bootcamps.
Who:   POST /api/v1/bootcamps and PUT /api/v1/bootcamps/{id}.

Rules the schema cannot express (unique name, one bootcamp per publisher)
are enforced by BootcampService.
"""

import re
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator

CAREERS = (
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
)

_URL_PATTERN = re.compile(
    r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)"
)
_EMAIL_PATTERN = re.compile(r"^[^@\s<>()\[\],;:\"]+@([a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}$")


def _check_website(v: str) -> str:
    if not _URL_PATTERN.match(v):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return v


def _check_email(v: str) -> str:
    if not _EMAIL_PATTERN.match(v):
        raise ValueError("Please add a valid email")
    return v


def _check_careers(v: List[str]) -> List[str]:
    if not v:
        raise ValueError("Please add at least one career")
    invalid = [career for career in v if career not in CAREERS]
    if invalid:
        raise ValueError(f"Invalid career(s): {', '.join(invalid)}")
    # keep first occurrence order, drop duplicates
    return list(dict.fromkeys(v))


Website = Annotated[str, AfterValidator(_check_website)]
Email = Annotated[str, AfterValidator(_check_email)]
Careers = Annotated[List[str], AfterValidator(_check_careers)]


class BootcampCreate(BaseModel):
    """
    Body of POST /api/v1/bootcamps.

    `address` is geocoded into `location` and then discarded; it is never
    stored. `slug`, `location`, `average_cost`, `photo` and `user_id` are
    derived server-side and ignored if sent.
    """

    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    website: Optional[Website] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[Email] = None
    address: str = Field(min_length=1)
    careers: Careers
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    @field_validator("name", "description", "address", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class BootcampUpdate(BaseModel):
    """Body of PUT /api/v1/bootcamps/{id}; every field optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[Website] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[Email] = None
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[Careers] = None
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    @field_validator("name", "description", "address", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v
