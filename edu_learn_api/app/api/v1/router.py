"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (courses, enrollments,
session tokens).  The endpoint modules declare their full paths
because the public URLs do not share a common prefix per domain
(``/courses`` next to ``/latest`` and ``/popular``).
"""

from fastapi import APIRouter

from .endpoints import auth, courses, enrollments, root

router = APIRouter()

router.include_router(root.router, tags=["root"])
router.include_router(auth.router, tags=["auth"])
router.include_router(courses.router, tags=["courses"])
router.include_router(enrollments.router, tags=["enrollments"])
