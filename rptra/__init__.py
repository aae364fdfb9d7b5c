"""
RPTRA community center backend.

FastAPI application serving the public site content (news, events, gallery,
videos, visitor requests) and the admin dashboard API, backed by MongoDB and
a GridFS bucket for uploaded files.
"""
