"""
Enrollment endpoints for API v1.

Every route requires authentication.  Students can only see and
manage their own enrollments: the ``email`` query parameter (or the
``student`` field of a new enrollment) must be the email carried by the
caller's token, otherwise HTTP 403 is returned.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from edu_learn_api.app.core.security import get_current_user, require_email_match
from edu_learn_api.app.schemas.enrollment import (
    EnrollmentCheck,
    EnrollmentCount,
    EnrollmentCreate,
    EnrollmentRead,
)
from edu_learn_api.app.services.enrollment_service import EnrollmentService
from edu_learn_api.app.services.errors import (
    CourseFull,
    CourseNotFound,
    DuplicateEnrollment,
    EnrollmentLimitReached,
    EnrollmentNotFound,
)


router = APIRouter()


@router.get("/enrollments", response_model=List[EnrollmentRead])
def list_enrollments(
    email: str = Query(..., description="Student email"),
    current_user: dict = Depends(get_current_user),
) -> List[EnrollmentRead]:
    """List the caller's enrollments with a summary of each course."""
    require_email_match(email, current_user)
    return EnrollmentService.list_for_student(email)


@router.get("/enrollments/check", response_model=EnrollmentCheck)
def check_enrollment(
    email: str = Query(...),
    course_id: str = Query(..., alias="courseId"),
    current_user: dict = Depends(get_current_user),
) -> EnrollmentCheck:
    """Tell whether the caller is enrolled in a course."""
    require_email_match(email, current_user)
    return EnrollmentService.check_enrollment(email, course_id)


@router.get("/enrollments/count", response_model=EnrollmentCount)
def count_enrollments(
    email: str = Query(...),
    current_user: dict = Depends(get_current_user),
) -> EnrollmentCount:
    """Number of active enrollments of the caller and how many remain."""
    require_email_match(email, current_user)
    return EnrollmentService.count_for_student(email)


@router.post("/enrollments", response_model=EnrollmentRead, status_code=status.HTTP_201_CREATED)
def create_enrollment(
    enrollment: EnrollmentCreate,
    current_user: dict = Depends(get_current_user),
) -> EnrollmentRead:
    """Enroll the caller in a course.

    Returns 409 for a duplicate enrollment and 400 when the student
    already holds the maximum number of enrollments or the course is
    full.
    """
    require_email_match(enrollment.student, current_user)
    try:
        return EnrollmentService.create_enrollment(enrollment)
    except CourseNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DuplicateEnrollment as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except (EnrollmentLimitReached, CourseFull) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete("/enrollments/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enrollment(
    enrollment_id: str,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Cancel one of the caller's enrollments and free its seat."""
    try:
        enrollment = EnrollmentService.get_enrollment(enrollment_id)
    except EnrollmentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    require_email_match(enrollment.student, current_user)
    try:
        EnrollmentService.delete_enrollment(enrollment_id)
    except EnrollmentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None
