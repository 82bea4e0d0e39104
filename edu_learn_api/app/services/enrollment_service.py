"""
Business logic for enrollments.

Creating an enrollment touches two documents: the enrollment itself
and the ``enrolledCount`` counter of the referenced course.  Both
counter updates use ``$inc`` so concurrent requests never lose an
increment, and the increment is conditional on a free seat so a course
cannot be overbooked.  When ``settings.mongodb_transactions`` is
enabled the two writes run in a single multi-document transaction;
otherwise a failed counter update is compensated by removing the
enrollment that was just inserted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.client_session import ClientSession
from pymongo.errors import DuplicateKeyError, PyMongoError

from edu_learn_api.app.core.config import settings
from edu_learn_api.app.core.db import (
    courses_collection,
    enrollments_collection,
    get_client,
    parse_object_id,
)
from edu_learn_api.app.schemas.course import CourseSummary
from edu_learn_api.app.schemas.enrollment import (
    ACTIVE,
    EnrollmentCheck,
    EnrollmentCount,
    EnrollmentCreate,
    EnrollmentRead,
)
from edu_learn_api.app.services.course_service import CourseService, as_int, as_text
from edu_learn_api.app.services.errors import (
    CourseFull,
    DuplicateEnrollment,
    EnrollmentLimitReached,
    EnrollmentNotFound,
)


logger = logging.getLogger(__name__)


def _run_writes(callback: Callable[[Optional[ClientSession]], Any]) -> Any:
    """Run ``callback`` inside a transaction when transactions are enabled."""
    if not settings.mongodb_transactions:
        return callback(None)
    with get_client().start_session() as session:
        return session.with_transaction(callback)


class EnrollmentService:
    """Service for creating, listing and cancelling enrollments."""

    @classmethod
    def create_enrollment(cls, data: EnrollmentCreate) -> EnrollmentRead:
        """Enroll a student in a course.

        Rules, checked in this order:

        * the course must exist (``CourseNotFound``);
        * the student may not already be enrolled (``DuplicateEnrollment``);
        * the student may hold at most ``max_enrollments_per_student``
          active enrollments (``EnrollmentLimitReached``);
        * the course must have a free seat (``CourseFull``).

        On success the course's ``enrolledCount`` grows by exactly one.
        """
        student = data.student.lower()
        course = CourseService.get_course_document(data.course_id)
        course_id = str(course["_id"])
        enrollments = enrollments_collection()

        if enrollments.find_one({"student": student, "courseId": course_id}):
            raise DuplicateEnrollment()
        limit = settings.max_enrollments_per_student
        if enrollments.count_documents({"student": student, "status": ACTIVE}) >= limit:
            raise EnrollmentLimitReached(limit)
        total_seats = as_int(course.get("totalSeats"))
        if as_int(course.get("enrolledCount")) >= total_seats:
            raise CourseFull()

        doc: Dict[str, Any] = {
            "student": student,
            "courseId": course_id,
            "enrolledAt": datetime.now(timezone.utc),
            "status": ACTIVE,
        }
        seat_filter = {
            "_id": course["_id"],
            "$or": [
                {"enrolledCount": {"$lt": total_seats}},
                {"enrolledCount": {"$exists": False}},
            ],
        }

        def write(session: Optional[ClientSession]) -> Any:
            try:
                inserted = enrollments.insert_one(dict(doc), session=session).inserted_id
            except DuplicateKeyError as exc:
                raise DuplicateEnrollment() from exc
            try:
                result = courses_collection().update_one(
                    seat_filter, {"$inc": {"enrolledCount": 1}}, session=session
                )
            except PyMongoError:
                if session is None:
                    logger.exception("Counter update failed for course %s; rolling back enrollment", course_id)
                    enrollments.delete_one({"_id": inserted})
                raise
            if result.matched_count == 0:
                # Another request took the last seat in the meantime.
                if session is None:
                    enrollments.delete_one({"_id": inserted})
                raise CourseFull()
            return inserted

        enrollment_id = _run_writes(write)
        doc["_id"] = enrollment_id
        logger.info("Enrolled %s in course %s (enrollment %s)", student, course_id, enrollment_id)
        return cls._to_enrollment_read(doc, course)

    @classmethod
    def get_enrollment(cls, enrollment_id: str) -> EnrollmentRead:
        return cls._to_enrollment_read(cls._get_document(enrollment_id))

    @classmethod
    def delete_enrollment(cls, enrollment_id: str) -> None:
        """Delete an enrollment and release its seat.

        The decrement only applies while the counter is positive, so the
        course's ``enrolledCount`` never goes below zero.
        """
        doc = cls._get_document(enrollment_id)
        course_oid = parse_object_id(doc.get("courseId", ""))

        def write(session: Optional[ClientSession]) -> bool:
            result = enrollments_collection().delete_one({"_id": doc["_id"]}, session=session)
            if not result.deleted_count:
                raise EnrollmentNotFound(enrollment_id)
            if course_oid is None:
                return False
            updated = courses_collection().update_one(
                {"_id": course_oid, "enrolledCount": {"$gt": 0}},
                {"$inc": {"enrolledCount": -1}},
                session=session,
            )
            return updated.matched_count > 0

        decremented = _run_writes(write)
        if not decremented:
            logger.warning(
                "Enrollment %s deleted but course %s counter was not decremented",
                enrollment_id,
                doc.get("courseId"),
            )
        logger.info("Deleted enrollment %s of %s", enrollment_id, doc.get("student"))

    @classmethod
    def list_for_student(cls, email: str) -> List[EnrollmentRead]:
        """Return a student's enrollments, newest first, with course summaries."""
        docs = list(
            enrollments_collection()
            .find({"student": email.lower()})
            .sort([("enrolledAt", DESCENDING), ("_id", DESCENDING)])
        )
        course_ids = [oid for oid in (parse_object_id(d.get("courseId", "")) for d in docs) if oid]
        courses = {
            str(c["_id"]): c for c in courses_collection().find({"_id": {"$in": course_ids}})
        } if course_ids else {}
        return [cls._to_enrollment_read(d, courses.get(d.get("courseId"))) for d in docs]

    @classmethod
    def check_enrollment(cls, email: str, course_id: str) -> EnrollmentCheck:
        doc = enrollments_collection().find_one({"student": email.lower(), "courseId": course_id})
        if not doc:
            return EnrollmentCheck(enrolled=False)
        return EnrollmentCheck(enrolled=True, enrollment_id=str(doc["_id"]))

    @classmethod
    def count_for_student(cls, email: str) -> EnrollmentCount:
        limit = settings.max_enrollments_per_student
        count = enrollments_collection().count_documents({"student": email.lower(), "status": ACTIVE})
        return EnrollmentCount(count=count, limit=limit, remaining=max(limit - count, 0))

    @staticmethod
    def _get_document(enrollment_id: str) -> Dict[str, Any]:
        oid = parse_object_id(enrollment_id)
        doc = enrollments_collection().find_one({"_id": oid}) if oid else None
        if not doc:
            raise EnrollmentNotFound(enrollment_id)
        return doc

    @staticmethod
    def _to_enrollment_read(doc: Dict[str, Any], course: Optional[Dict[str, Any]] = None) -> EnrollmentRead:
        summary = None
        if course:
            summary = CourseSummary(
                id=str(course["_id"]),
                title=as_text(course.get("title")) or "",
                instructor_name=as_text(course.get("instructorName")),
                duration=as_text(course.get("duration")),
                image=as_text(course.get("image")),
            )
        enrolled_at = doc.get("enrolledAt")
        return EnrollmentRead(
            id=str(doc["_id"]),
            student=as_text(doc.get("student")) or "",
            course_id=as_text(doc.get("courseId")) or "",
            enrolled_at=enrolled_at if isinstance(enrolled_at, datetime) else None,
            status=as_text(doc.get("status")) or ACTIVE,
            course=summary,
        )
