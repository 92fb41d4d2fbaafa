#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the file vault entities.

- Integer autoincrement primary key
- created_at / updated_at timestamps, stored as naive UTC

Timestamps are set from the application clock rather than the database
(func.now() on SQLite only has second resolution, and session eviction
orders by creation time).
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time without tzinfo, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel:
    """Base mixin for all persistent models: id, created_at, updated_at."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
