"""
parking_access.db

Persistence package (SQLAlchemy async). This is the record store collaborator.

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# This package is designed to be replaceable (e.g., switching DB backends) without
# rewriting service logic.
