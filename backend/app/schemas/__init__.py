"""
SocialConnect Backend — Pydantic Request/Response Schemas
===========================================================

Schemas are separate from the SQLAlchemy models: they define exactly what
the API accepts and exposes (a user's password hash never leaves the
service layer) and drive the OpenAPI docs.
"""
