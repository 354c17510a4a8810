"""
parking_access.cache

Read-through cache package.

Responsibilities:
- Derive cache keys from query shape (`keys`).
- Talk to the key-value store behind a small get/set interface (`backends`).
- Orchestrate check-cache / load / populate (`accessor`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Cache entries are disposable memos of authorized results; nothing here decides
# who may see what.
