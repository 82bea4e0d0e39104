#!/usr/bin/env python3
"""
Recompute the ``enrolledCount`` counter of courses from their enrollments.

The counter is maintained incrementally by the API.  If it ever drifts
(manual edits in the database, a crash between writes on a server
without transactions), this script rebuilds it from the Active
enrollments and reports every course it corrected.

Usage:
    python recount_enrollments.py                       # all courses
    python recount_enrollments.py --course 65f0c0ffee...  # one course
    python recount_enrollments.py --uri mongodb://localhost:27017 --db eduLearn
"""

import argparse
import sys

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from edu_learn_api.app.core.config import settings
from edu_learn_api.app.core.db import close_client, use_client
from edu_learn_api.app.services.course_service import CourseService
from edu_learn_api.app.services.errors import CourseNotFound


def main() -> None:
    ap = argparse.ArgumentParser(description="Rebuild course enrollment counters.")
    ap.add_argument("--uri", default=settings.mongodb_uri, help="MongoDB connection string")
    ap.add_argument("--db", default=settings.mongodb_db, help="Database name")
    ap.add_argument("--course", help="Only recount this course id")
    args = ap.parse_args()

    settings.mongodb_db = args.db
    use_client(MongoClient(args.uri, serverSelectionTimeoutMS=settings.mongodb_timeout_ms))
    try:
        fixed = CourseService.recount_enrollments(args.course)
    except CourseNotFound as e:
        print(f"[!] {e}", file=sys.stderr)
        sys.exit(2)
    except PyMongoError as e:
        print(f"[!] Database error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        close_client()

    if not fixed:
        print("[+] All enrollment counters are correct")
    for course_id, count in fixed.items():
        print(f"[+] Course {course_id}: enrolledCount set to {count}")


if __name__ == "__main__":
    main()
