"""
Course endpoints for API v1.

The catalogue (``GET /courses``, ``/courses/{id}``, ``/latest``,
``/popular``) is public.  Creating, editing and deleting a course
requires a token whose email is the course's ``instructorEmail``, and
the instructor views (``?email=`` filters and per-course enrollment
counts) are only served to the instructor themselves.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from edu_learn_api.app.core.security import get_current_user, get_optional_user, require_email_match
from edu_learn_api.app.schemas.course import CourseCreate, CourseRead, CourseUpdate, InstructorCourseCount
from edu_learn_api.app.services.course_service import CourseService
from edu_learn_api.app.services.errors import CourseNotFound, InvalidCourseUpdate


router = APIRouter()


def _ensure_instructor(course_id: str, current_user: dict) -> None:
    """Raise 404 for unknown courses and 403 if the caller does not own it."""
    try:
        doc = CourseService.get_course_document(course_id)
    except CourseNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    require_email_match(doc.get("instructorEmail"), current_user)


@router.get("/courses", response_model=List[CourseRead])
def list_courses(
    email: Optional[str] = Query(None, description="Only courses taught by this instructor"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: Optional[dict] = Depends(get_optional_user),
) -> List[CourseRead]:
    """List courses, newest first.

    Without ``email`` the full catalogue is returned to anyone.  With
    ``email`` the caller must be authenticated as that instructor.
    """
    if email is not None:
        if current_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        require_email_match(email, current_user)
    return CourseService.list_courses(instructor_email=email, limit=limit, offset=offset)


@router.post("/courses", response_model=CourseRead, status_code=status.HTTP_201_CREATED)
def create_course(
    course: CourseCreate,
    current_user: dict = Depends(get_current_user),
) -> CourseRead:
    """Publish a new course; the caller must be the named instructor."""
    require_email_match(course.instructor_email, current_user)
    return CourseService.create_course(course)


@router.get("/courses/enrollments", response_model=List[InstructorCourseCount])
def instructor_enrollment_counts(
    email: str = Query(..., description="Instructor email"),
    current_user: dict = Depends(get_current_user),
) -> List[InstructorCourseCount]:
    """Enrollment counts for each course of the authenticated instructor."""
    require_email_match(email, current_user)
    return CourseService.instructor_enrollment_counts(email)


@router.get("/courses/{course_id}", response_model=CourseRead)
def get_course(course_id: str) -> CourseRead:
    """Retrieve a single course.

    ``seatsLeft`` is ``totalSeats - enrolledCount`` without clamping, so
    it is negative for a course whose capacity was cut below its
    enrollments directly in the database.
    """
    try:
        return CourseService.get_course(course_id)
    except CourseNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


# Older clients fetch single courses from the singular path.
router.add_api_route("/course/{course_id}", get_course, methods=["GET"], response_model=CourseRead)


@router.put("/courses/{course_id}", response_model=CourseRead)
def update_course(
    course_id: str,
    updates: CourseUpdate,
    current_user: dict = Depends(get_current_user),
) -> CourseRead:
    """Update an existing course (instructor only).

    Partial updates are supported; the enrollment counter, publish
    date and instructor email cannot be changed here.
    """
    _ensure_instructor(course_id, current_user)
    try:
        return CourseService.update_course(course_id, updates)
    except CourseNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidCourseUpdate as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: str,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete a course and every enrollment in it (instructor only)."""
    _ensure_instructor(course_id, current_user)
    try:
        CourseService.delete_course(course_id)
    except CourseNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None


@router.get("/latest", response_model=List[CourseRead])
def latest_courses(limit: int = Query(6, ge=1, le=100)) -> List[CourseRead]:
    """The most recently published courses."""
    return CourseService.latest_courses(limit=limit)


@router.get("/popular", response_model=List[CourseRead])
def popular_courses(limit: int = Query(6, ge=1, le=100)) -> List[CourseRead]:
    """The courses with the highest enrollment counts."""
    return CourseService.popular_courses(limit=limit)
