"""
Domain errors raised by the service layer.

They derive from ``ValueError`` so callers that only care about "the
request could not be honoured" can catch that; endpoints catch the
specific classes and translate them into HTTP status codes.
"""


class CourseNotFound(ValueError):
    def __init__(self, course_id: str) -> None:
        super().__init__(f"Course {course_id} not found")
        self.course_id = course_id


class EnrollmentNotFound(ValueError):
    def __init__(self, enrollment_id: str) -> None:
        super().__init__(f"Enrollment {enrollment_id} not found")
        self.enrollment_id = enrollment_id


class DuplicateEnrollment(ValueError):
    def __init__(self) -> None:
        super().__init__("Already enrolled in this course")


class EnrollmentLimitReached(ValueError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Enrollment limit reached: a student may hold at most {limit} enrollments")
        self.limit = limit


class CourseFull(ValueError):
    def __init__(self) -> None:
        super().__init__("Course is full")


class InvalidCourseUpdate(ValueError):
    """The requested change would break a course invariant."""
