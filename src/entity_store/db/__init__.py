"""
entity_store.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Declarative base, the entity contract and its column mixins.
- Entity mapping configuration applied at bootstrap.
- Engine/session factories and the unit of work.
"""

# Package marker.
