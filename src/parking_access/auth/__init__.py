"""
parking_access.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependency producing an `AuthenticatedCaller`.
- Role policy deciding what each caller may see or change.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Policy decisions are plain functions; nothing here depends on FastAPI except `deps`.
