"""
MongoDB integration.

This module owns the single long-lived ``MongoClient`` used by the
application and exposes accessors for the two collections the API
works with (``courses`` and ``enrollments``).  ``init_db`` runs at
application start and creates the indexes the services rely on, most
importantly the unique (student, courseId) index that rejects
duplicate enrollments at the store level.

The client is created lazily on first use.  Tests and maintenance
scripts may install their own client through ``use_client``.
"""

import logging
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .config import settings


COURSES = "courses"
ENROLLMENTS = "enrollments"

logger = logging.getLogger(__name__)

_client: Optional[Any] = None


def get_client() -> MongoClient:
    """Return the shared MongoDB client, connecting on first call."""
    global _client
    if _client is None:
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
            tz_aware=True,
        )
        logger.info("Connected MongoDB client for database %s", settings.mongodb_db)
    return _client


def use_client(client: Any) -> None:
    """Replace the shared client (e.g. with ``mongomock.MongoClient()``)."""
    global _client
    _client = client


def close_client() -> None:
    """Close and forget the shared client."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_database() -> Database:
    return get_client()[settings.mongodb_db]


def courses_collection() -> Collection:
    return get_database()[COURSES]


def enrollments_collection() -> Collection:
    return get_database()[ENROLLMENTS]


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Convert a string to an ``ObjectId`` or return ``None`` if malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def is_database_available() -> bool:
    """Return True if the database answers a cheap round trip."""
    try:
        get_database().list_collection_names()
        return True
    except Exception:
        logger.exception("MongoDB health check failed")
        return False


def init_db() -> None:
    """Create the indexes used by the services.

    ``create_index`` is idempotent, so this is safe to run on every
    start.  The unique index on enrollments backs the duplicate
    enrollment rule even under concurrent requests.
    """
    courses = courses_collection()
    courses.create_index([("instructorEmail", ASCENDING)])
    courses.create_index([("publishDate", DESCENDING)])
    courses.create_index([("enrolledCount", DESCENDING)])

    enrollments = enrollments_collection()
    enrollments.create_index(
        [("student", ASCENDING), ("courseId", ASCENDING)],
        unique=True,
        name="student_course_unique",
    )
    enrollments.create_index([("courseId", ASCENDING)])
    logger.info("MongoDB indexes ensured on %s", settings.mongodb_db)
