"""
Service layer.

Each service encapsulates the business rules of one domain and talks
to MongoDB directly, so API handlers only translate between HTTP and
service calls.
"""
