"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - to_dict() returns column values only (no relationships), keyed by column name

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - to_dict() feeds the pure aggregations in core/ with plain row dicts
"""

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all FarmOps ORM models."""

    def to_dict(self) -> dict:
        mapper = inspect(type(self))
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in mapper.column_attrs
        }
