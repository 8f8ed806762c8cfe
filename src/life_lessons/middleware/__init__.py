"""ASGI middleware for the Life Lessons API."""
