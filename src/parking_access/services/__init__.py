"""
parking_access.services

Service-layer package: one resource access service per resource type.

Responsibilities:
- Gate every operation through the role policy.
- Own transaction boundaries and persistence decisions.
- Route reads through the cache-aside accessor.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are plain Python and testable with an in-memory store and cache.
