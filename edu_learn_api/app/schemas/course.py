"""
Pydantic models for course data.

``CourseCreate`` is the body of ``POST /courses``; ``CourseUpdate``
carries the catalogue fields an instructor may change later.  The
enrollment counter and the publish date are owned by the server and
never accepted from clients.  ``CourseRead`` adds the identifier, the
counter and the derived ``seatsLeft`` value.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel


class CourseBase(CamelModel):
    title: str = Field(..., min_length=1, examples=["Intro to Python"])
    instructor_name: str = Field(..., min_length=1, examples=["Ada Lovelace"])
    duration: str = Field(..., examples=["6 weeks"])
    total_seats: int = Field(..., ge=0, examples=[30])
    description: Optional[str] = None
    image: Optional[str] = Field(None, description="URL of the course cover image")
    price: Optional[float] = Field(None, ge=0)


class CourseCreate(CourseBase):
    """Schema for creating a course."""

    instructor_email: EmailStr = Field(..., examples=["ada@example.com"])


class CourseUpdate(CamelModel):
    """Schema for updating a course.

    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(None, min_length=1)
    instructor_name: Optional[str] = Field(None, min_length=1)
    duration: Optional[str] = None
    total_seats: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)


class CourseRead(CamelModel):
    """Schema for reading a course from the API.

    Stored documents are loosely typed, so none of the create-side
    constraints apply and absent fields come back as ``None``.
    """

    id: str
    title: str = ""
    instructor_name: Optional[str] = None
    instructor_email: Optional[str] = None
    duration: Optional[str] = None
    total_seats: int = 0
    enrolled_count: int = 0
    seats_left: int = 0
    publish_date: Optional[datetime] = None
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None


class CourseSummary(CamelModel):
    """Short description of a course embedded in enrollment listings."""

    id: str
    title: str
    instructor_name: Optional[str] = None
    duration: Optional[str] = None
    image: Optional[str] = None


class InstructorCourseCount(CamelModel):
    """Enrollment figures for one of an instructor's courses."""

    course_id: str
    title: str
    enrolled_count: int
    total_seats: int
    seats_left: int
