"""
Business logic for courses.

``CourseService`` creates, lists, updates and deletes course documents
and computes the figures derived from the enrollment counter.  The
counter itself (``enrolledCount``) is only written by the enrollment
service and by ``recount_enrollments``, which rebuilds it from the
enrollments collection when it has drifted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument

from edu_learn_api.app.core.db import courses_collection, enrollments_collection, parse_object_id
from edu_learn_api.app.schemas.course import (
    CourseCreate,
    CourseRead,
    CourseUpdate,
    InstructorCourseCount,
)
from edu_learn_api.app.schemas.enrollment import ACTIVE
from edu_learn_api.app.services.errors import CourseNotFound, InvalidCourseUpdate


logger = logging.getLogger(__name__)


def as_int(value: Any) -> int:
    """Read a stored number, treating absent or malformed values as 0."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def seats_left(doc: Dict[str, Any]) -> int:
    """Return ``totalSeats - enrolledCount`` for a course document.

    A missing counter counts as zero.  The result is not clamped: it is
    negative when ``totalSeats`` was lowered below the counter directly
    in the database.
    """
    return as_int(doc.get("totalSeats")) - as_int(doc.get("enrolledCount"))


class CourseService:
    """Service for managing courses."""

    _NEWEST_FIRST = [("publishDate", DESCENDING), ("_id", DESCENDING)]

    @classmethod
    def create_course(cls, data: CourseCreate) -> CourseRead:
        """Insert a new course.

        ``enrolledCount`` starts at zero and ``publishDate`` is set to
        the current time regardless of the request body.
        """
        doc = data.model_dump(by_alias=True)
        doc["instructorEmail"] = doc["instructorEmail"].lower()
        doc["enrolledCount"] = 0
        doc["publishDate"] = datetime.now(timezone.utc)
        result = courses_collection().insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Created course %s (%s) for %s", result.inserted_id, data.title, doc["instructorEmail"])
        return cls._to_course_read(doc)

    @classmethod
    def list_courses(
        cls,
        instructor_email: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[CourseRead]:
        """Return courses, newest first, optionally filtered by instructor."""
        query: Dict[str, Any] = {}
        if instructor_email:
            query["instructorEmail"] = instructor_email.lower()
        cursor = courses_collection().find(query).sort(cls._NEWEST_FIRST).skip(offset).limit(limit)
        return [cls._to_course_read(doc) for doc in cursor]

    @classmethod
    def latest_courses(cls, limit: int = 6) -> List[CourseRead]:
        cursor = courses_collection().find({}).sort(cls._NEWEST_FIRST).limit(limit)
        return [cls._to_course_read(doc) for doc in cursor]

    @classmethod
    def popular_courses(cls, limit: int = 6) -> List[CourseRead]:
        """Return the courses with the most enrollments."""
        cursor = (
            courses_collection()
            .find({})
            .sort([("enrolledCount", DESCENDING)] + cls._NEWEST_FIRST)
            .limit(limit)
        )
        return [cls._to_course_read(doc) for doc in cursor]

    @classmethod
    def get_course_document(cls, course_id: str) -> Dict[str, Any]:
        """Fetch the raw course document or raise ``CourseNotFound``."""
        oid = parse_object_id(course_id)
        doc = courses_collection().find_one({"_id": oid}) if oid else None
        if not doc:
            raise CourseNotFound(course_id)
        return doc

    @classmethod
    def get_course(cls, course_id: str) -> CourseRead:
        return cls._to_course_read(cls.get_course_document(course_id))

    @classmethod
    def update_course(cls, course_id: str, updates: CourseUpdate) -> CourseRead:
        """Apply a partial update to a course.

        Fields left unset (or set to ``None``) keep their value.  The
        seat capacity may not be lowered below the current number of
        enrollments.
        """
        doc = cls.get_course_document(course_id)
        changes = {k: v for k, v in updates.model_dump(by_alias=True, exclude_unset=True).items() if v is not None}
        if not changes:
            return cls._to_course_read(doc)
        new_total = changes.get("totalSeats")
        if new_total is not None and new_total < as_int(doc.get("enrolledCount")):
            raise InvalidCourseUpdate(
                f"totalSeats cannot be lower than the {doc.get('enrolledCount')} current enrollments"
            )
        updated = courses_collection().find_one_and_update(
            {"_id": doc["_id"]},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not updated:
            raise CourseNotFound(course_id)
        logger.info("Updated course %s: %s", course_id, sorted(changes))
        return cls._to_course_read(updated)

    @classmethod
    def delete_course(cls, course_id: str) -> int:
        """Delete a course together with its enrollments.

        Returns the number of enrollments removed with the course.
        """
        doc = cls.get_course_document(course_id)
        result = courses_collection().delete_one({"_id": doc["_id"]})
        if not result.deleted_count:
            raise CourseNotFound(course_id)
        removed = enrollments_collection().delete_many({"courseId": str(doc["_id"])}).deleted_count
        logger.info("Deleted course %s and %s enrollments", course_id, removed)
        return removed

    @classmethod
    def instructor_enrollment_counts(cls, instructor_email: str) -> List[InstructorCourseCount]:
        """Return enrollment figures for every course of an instructor."""
        cursor = courses_collection().find({"instructorEmail": instructor_email.lower()}).sort(cls._NEWEST_FIRST)
        return [
            InstructorCourseCount(
                course_id=str(doc["_id"]),
                title=as_text(doc.get("title")) or "",
                enrolled_count=as_int(doc.get("enrolledCount")),
                total_seats=as_int(doc.get("totalSeats")),
                seats_left=seats_left(doc),
            )
            for doc in cursor
        ]

    @classmethod
    def recount_enrollments(cls, course_id: Optional[str] = None) -> Dict[str, int]:
        """Rebuild ``enrolledCount`` from the Active enrollments.

        Recounts a single course when ``course_id`` is given, otherwise
        every course.  Returns ``{course_id: new_count}`` for the
        courses whose stored counter was wrong.
        """
        courses = courses_collection()
        enrollments = enrollments_collection()
        if course_id is not None:
            docs = [cls.get_course_document(course_id)]
        else:
            docs = courses.find({}, {"enrolledCount": 1})
        fixed: Dict[str, int] = {}
        for doc in docs:
            cid = str(doc["_id"])
            actual = enrollments.count_documents({"courseId": cid, "status": ACTIVE})
            stored = doc.get("enrolledCount")
            if stored != actual:
                courses.update_one({"_id": doc["_id"]}, {"$set": {"enrolledCount": actual}})
                logger.warning("Course %s enrolledCount drifted: stored %s, actual %s", cid, stored, actual)
                fixed[cid] = actual
        return fixed

    @staticmethod
    def _to_course_read(doc: Dict[str, Any]) -> CourseRead:
        publish_date = doc.get("publishDate")
        price = doc.get("price")
        return CourseRead(
            id=str(doc["_id"]),
            title=as_text(doc.get("title")) or "",
            instructor_name=as_text(doc.get("instructorName")),
            instructor_email=as_text(doc.get("instructorEmail")),
            duration=as_text(doc.get("duration")),
            total_seats=as_int(doc.get("totalSeats")),
            enrolled_count=as_int(doc.get("enrolledCount")),
            seats_left=seats_left(doc),
            publish_date=publish_date if isinstance(publish_date, datetime) else None,
            description=as_text(doc.get("description")),
            image=as_text(doc.get("image")),
            price=price if isinstance(price, (int, float)) else None,
        )
