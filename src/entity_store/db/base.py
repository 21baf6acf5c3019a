"""
entity_store.db.base

SQLAlchemy declarative base shared by every mapped entity.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
