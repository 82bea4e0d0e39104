"""
Pydantic models for enrollments.

An enrollment links a student (identified by email) to a course.  The
status is always ``Active``; no other lifecycle state is modelled, so
cancelling an enrollment deletes it.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel
from .course import CourseSummary


ACTIVE = "Active"


class EnrollmentCreate(CamelModel):
    """Schema for creating an enrollment."""

    student: EmailStr = Field(..., examples=["student@example.com"])
    course_id: str = Field(..., min_length=1)


class EnrollmentRead(CamelModel):
    id: str
    student: str
    course_id: str
    enrolled_at: Optional[datetime] = None
    status: str = ACTIVE
    course: Optional[CourseSummary] = None


class EnrollmentCheck(CamelModel):
    """Answer of ``GET /enrollments/check``."""

    enrolled: bool
    enrollment_id: Optional[str] = None


class EnrollmentCount(CamelModel):
    """Answer of ``GET /enrollments/count``."""

    count: int
    limit: int
    remaining: int
