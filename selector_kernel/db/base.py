"""
Module: selector_kernel.db.base
Responsibility: Declarative base for the entity types that selectors query.
    Provides the UUID primary key convention and the type annotation map.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from schema/, selectors/ or store.

Invariants enforced:
    - Every entity type has a primary key attribute named ``id``; selectors
      filter on it with ``WHERE id in :ids``.
    - UUIDs are stored as String(36); the record store binds UUID
      identifiers in the same string form.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on ORM SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all entity types.

    Subclasses may redeclare ``id`` to change the column name (for example
    ``mapped_column("Id", UUIDString(), primary_key=True, default=uuid4)``)
    but keep the attribute itself.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )
