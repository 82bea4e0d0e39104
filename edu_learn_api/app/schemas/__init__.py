"""
Pydantic schema definitions for API payloads.

Each domain (courses, enrollments, auth) defines its own models for
request and response bodies.  Schemas are kept separate from the raw
MongoDB documents so the wire format stays stable if storage changes.
"""
