"""
Backend package for the workshop feedback service.

This package provides a FastAPI application with document store, object
storage, session store and code delivery abstractions, so the attendee flow
and the admin tools run against managed services in production and
in-memory doubles in tests.
"""
