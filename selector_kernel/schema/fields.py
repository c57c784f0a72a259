"""
Module: selector_kernel.schema.fields
Responsibility: Value types for field references.  A FieldIdentifier names one
    queryable column of an entity type; a FieldSetDescriptor is a named,
    ordered group of them defined by schema configuration.
Architecture position: Kernel > Schema.  Leaf module; imports only
    exceptions and SQLAlchemy attribute types.

Invariants enforced:
    - FieldIdentifier equality and hash use the field name only, so the same
      column reached through different references de-duplicates.
    - FieldSetDescriptor member order is preserved exactly as declared.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from sqlalchemy import Column
from sqlalchemy.orm import ColumnProperty, QueryableAttribute

from selector_kernel.exceptions import UnknownFieldError


@dataclass(frozen=True)
class FieldIdentifier:
    """One queryable field of an entity type, compared by name."""

    name: str
    entity: str | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.name

    @classmethod
    def of(cls, ref: "FieldIdentifier | str | QueryableAttribute | Column") -> "FieldIdentifier":
        """
        Coerce a field reference into a FieldIdentifier.

        Accepts an existing FieldIdentifier, a plain column name, a mapped
        column attribute (``Account.Name``) or a Core ``Column``.

        Raises:
            UnknownFieldError: for anything else, including relationship
                attributes.
        """
        if isinstance(ref, FieldIdentifier):
            return ref
        if isinstance(ref, str):
            if not ref:
                raise UnknownFieldError(ref)
            return cls(ref)
        if isinstance(ref, QueryableAttribute):
            prop = ref.property
            if not isinstance(prop, ColumnProperty):
                raise UnknownFieldError(ref.key)
            column = prop.columns[0]
            return cls(column.name, entity=ref.class_.__table__.name)
        if isinstance(ref, Column):
            table = getattr(ref, "table", None)
            return cls(ref.name, entity=table.name if table is not None else None)
        raise UnknownFieldError(ref)


@dataclass(frozen=True)
class FieldSetDescriptor:
    """A named, ordered group of fields on one entity type."""

    name: str
    entity: str
    fields: tuple[FieldIdentifier, ...] = ()

    def __iter__(self) -> Iterator[FieldIdentifier]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def expand(self) -> tuple[FieldIdentifier, ...]:
        """Return the member fields in declared order."""
        return self.fields
