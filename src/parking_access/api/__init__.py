"""
parking_access.api

API package for the parking access service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request parsing + authentication + delegation to services.
