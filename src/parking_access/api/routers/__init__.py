"""
parking_access.api.routers

HTTP routers. Each router parses the request, resolves the caller and delegates to a
resource access service.
"""

# Package marker.
