"""
Module: selector_kernel.schema.describe
Responsibility: Schema/metadata collaborator for selectors.  Resolves an
    entity type (a SQLAlchemy mapped class) to its name, label, columns and
    configured field sets, and reports whether the current caller may read it.
Architecture position: Kernel > Schema.  May import from schema/fields.py,
    exceptions and logging_config.  MUST NOT import from selectors/ or store.

Invariants enforced:
    - Describes are computed once per entity type and cached for the life of
      the SchemaDescribe instance.
    - Field-set members are validated against the entity's columns when the
      entity is first described; a bad member fails loudly, never silently.
    - Field name resolution returns the declared column name, so rendered
      field lists always use the schema's own spelling.

Failure modes:
    - UnknownEntityTypeError for classes SQLAlchemy cannot inspect.
    - UnknownFieldError / UnknownFieldSetError for unresolved references.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from selector_kernel.exceptions import (
    UnknownEntityTypeError,
    UnknownFieldError,
    UnknownFieldSetError,
)
from selector_kernel.logging_config import get_logger
from selector_kernel.schema.fields import FieldIdentifier, FieldSetDescriptor

logger = get_logger("schema.describe")


@dataclass(frozen=True)
class EntityDescribe:
    """Metadata for one entity type."""

    name: str
    label: str
    fields: tuple[FieldIdentifier, ...]
    field_sets: tuple[FieldSetDescriptor, ...] = ()

    def find_field(self, name: str) -> FieldIdentifier | None:
        """Like field(), but returns None when no column matches."""
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        lowered = name.lower()
        for candidate in self.fields:
            if candidate.name.lower() == lowered:
                return candidate
        return None

    def field(self, name: str) -> FieldIdentifier:
        """
        Look up a field by name.

        Exact match first, then case-insensitive.  Returns the identifier
        carrying the declared column name.

        Raises:
            UnknownFieldError: If no column matches.
        """
        found = self.find_field(name)
        if found is None:
            raise UnknownFieldError(name, self.name)
        return found

    def field_set(self, name: str) -> FieldSetDescriptor:
        """
        Look up a field set by name.

        Raises:
            UnknownFieldSetError: If no field set with that name exists.
        """
        for descriptor in self.field_sets:
            if descriptor.name == name:
                return descriptor
        raise UnknownFieldSetError(name, self.name)


@dataclass(frozen=True)
class AccessPolicy:
    """
    Read permissions of the current caller.

    ``readable=None`` grants every entity that is not explicitly denied.
    Denial always wins over a grant.
    """

    readable: frozenset[str] | None = None
    denied: frozenset[str] = field(default_factory=frozenset)

    def can_read(self, entity_name: str) -> bool:
        if entity_name in self.denied:
            return False
        if self.readable is None:
            return True
        return entity_name in self.readable


class SchemaDescribe:
    """
    Describe service over SQLAlchemy mapped classes.

    Contract:
        Entity types are declarative model classes.  The entity name is the
        mapped table name; fields are the mapped table's columns.

    Non-goals:
        - No relationship traversal; relation prefixes in rendered field
          lists are the caller's responsibility.
    """

    def __init__(
        self,
        access_policy: AccessPolicy | None = None,
        field_sets: Mapping[str, Mapping[str, Sequence[str]]] | None = None,
    ):
        """
        Args:
            access_policy: Read permissions of the current caller.  Defaults
                to allowing every entity type.
            field_sets: ``{entity_name: {field_set_name: [field, ...]}}``.
        """
        self.access_policy = access_policy or AccessPolicy()
        self._field_set_defs: dict[str, dict[str, tuple[str, ...]]] = {
            entity: {name: tuple(members) for name, members in sets.items()}
            for entity, sets in (field_sets or {}).items()
        }
        self._cache: dict[type, EntityDescribe] = {}

    def _mapper(self, entity_type: Any) -> Mapper:
        try:
            mapper = inspect(entity_type)
        except NoInspectionAvailable:
            raise UnknownEntityTypeError(entity_type) from None
        if not isinstance(mapper, Mapper):
            raise UnknownEntityTypeError(entity_type)
        return mapper

    def describe(self, entity_type: Any) -> EntityDescribe:
        """
        Describe an entity type.

        Raises:
            UnknownEntityTypeError: If entity_type is not a mapped class.
            UnknownFieldError: If a configured field set names a column the
                entity does not have.
        """
        cached = self._cache.get(entity_type)
        if cached is not None:
            return cached

        mapper = self._mapper(entity_type)
        name = mapper.local_table.name
        fields = tuple(
            FieldIdentifier(column.name, entity=name)
            for column in mapper.local_table.columns
        )
        partial = EntityDescribe(
            name=name,
            label=getattr(entity_type, "__label__", entity_type.__name__),
            fields=fields,
        )
        field_sets = tuple(
            FieldSetDescriptor(
                name=set_name,
                entity=name,
                fields=tuple(partial.field(member) for member in members),
            )
            for set_name, members in self._field_set_defs.get(name, {}).items()
        )
        described = EntityDescribe(
            name=partial.name,
            label=partial.label,
            fields=partial.fields,
            field_sets=field_sets,
        )
        self._cache[entity_type] = described
        logger.debug(
            "entity_described",
            extra={
                "entity": name,
                "field_count": len(fields),
                "field_sets": [fs.name for fs in field_sets],
            },
        )
        return described

    def entity_name(self, entity_type: Any) -> str:
        """Name of the entity type as used in query text."""
        return self.describe(entity_type).name

    def entity_label(self, entity_type: Any) -> str:
        """Human display label of the entity type."""
        return self.describe(entity_type).label

    def is_readable(self, entity_type: Any) -> bool:
        """Whether the current caller may read the entity type."""
        return self.access_policy.can_read(self.entity_name(entity_type))

    def field(self, entity_type: Any, ref: Any) -> FieldIdentifier:
        """
        Resolve a field reference against an entity type.

        Raises:
            UnknownFieldError: If the reference does not name one of the
                entity's columns.
        """
        identifier = FieldIdentifier.of(ref)
        return self.describe(entity_type).field(identifier.name)

    def find_field(self, entity_type: Any, ref: Any) -> FieldIdentifier | None:
        """Resolve a field reference, or None if the entity has no such column."""
        return self.describe(entity_type).find_field(FieldIdentifier.of(ref).name)

    def fields(self, entity_type: Any, refs: Iterable[Any]) -> list[FieldIdentifier]:
        """Resolve several field references, preserving order."""
        return [self.field(entity_type, ref) for ref in refs]

    def field_set(self, entity_type: Any, ref: FieldSetDescriptor | str) -> FieldSetDescriptor:
        """
        Resolve a field set by name; descriptors pass through unchanged.

        Raises:
            UnknownFieldSetError: If the name is not registered for the entity.
        """
        if isinstance(ref, FieldSetDescriptor):
            return ref
        return self.describe(entity_type).field_set(ref)
