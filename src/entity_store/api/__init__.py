"""
entity_store.api

FastAPI integration.

Responsibilities:
- App factory owning the engine/sessionmaker lifecycle.
- Dependencies that inject sessions, units of work and repositories.
"""

# Package marker.
