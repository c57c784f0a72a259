"""
Module: selector_kernel.selectors.base
Responsibility: Abstract base class for identifier-scoped read selectors.
    A concrete selector declares which entity type it reads and which fields
    it always selects; the base class assembles the field list, renders the
    query, enforces read access and executes through the record store.
Architecture position: Kernel > Selectors.  May import from schema/, store,
    selectors/field_list.py, exceptions and logging_config.  MUST NOT import
    from selector_config (configuration arrives as SelectorPolicy).

Invariants enforced:
    - Read access is checked before every execution path; a denied read
      never reaches the record store.
    - The builder is demand-created at most once per selector and reused
      until explicitly replaced with set_builder().
    - Query text follows exactly
      ``SELECT <fields> FROM <entity> WHERE id in :ids ORDER BY <order_by>``
      with the identifier set bound as a parameter.

Failure modes:
    - AccessDeniedError when the caller may not read the entity type.
    - UnknownFieldError / UnknownFieldSetError when a declared reference does
      not resolve against the schema (raised on first builder creation).
    - Record-store errors (sqlalchemy.exc.*) propagate unchanged.

Concurrency:
    Selectors are request-scoped and not safe for concurrent use; the
    builder slot is not synchronized.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from sqlalchemy.orm import Session

from selector_kernel.exceptions import AccessDeniedError
from selector_kernel.logging_config import LogContext, get_logger
from selector_kernel.schema.describe import SchemaDescribe
from selector_kernel.schema.fields import FieldSetDescriptor
from selector_kernel.selectors.field_list import FieldListBuilder, SelectorPolicy
from selector_kernel.store import QueryHandle, Record, RecordStore

logger = get_logger("selectors.base")

ID_QUERY_TEMPLATE = "SELECT {fields} FROM {entity} WHERE id in :ids ORDER BY {order_by}"


class _BuilderSlot:
    """Two-state cell holding a selector's builder: unset, then set."""

    __slots__ = ("_builder",)

    def __init__(self):
        self._builder: FieldListBuilder | None = None

    @property
    def is_set(self) -> bool:
        return self._builder is not None

    def get_or_create(self, factory: Callable[[], FieldListBuilder]) -> FieldListBuilder:
        if self._builder is None:
            self._builder = factory()
        return self._builder

    def replace(self, builder: FieldListBuilder) -> None:
        # There is no way back to unset.
        if not isinstance(builder, FieldListBuilder):
            raise TypeError(
                f"Expected a FieldListBuilder, got {type(builder).__name__}"
            )
        self._builder = builder


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Subclasses implement ``entity_type()`` and ``field_list()`` and may
        override ``field_set_list()`` and ``order_by_clause()``.  Everything
        else is provided.

    Guarantees:
        - session is stored as a public attribute; selectors never commit,
          flush, add or delete.
        - The field list, once built, is stable for the selector's lifetime
          unless set_builder() replaces it.

    Non-goals:
        - No filters other than the identifier set, no joins, no paging.
    """

    def __init__(
        self,
        session: Session,
        schema: SchemaDescribe,
        *,
        include_field_sets: bool = False,
        policy: SelectorPolicy | None = None,
        store: RecordStore | None = None,
    ):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session owned by the caller.
            schema: Schema/metadata collaborator for the current caller.
            include_field_sets: If True, fields from field_set_list() are
                selected as well.
            policy: Field policy (policy field, exemptions, default order).
            store: Record store; defaults to one over ``session``.
        """
        self.session = session
        self.schema = schema
        self.include_field_sets = include_field_sets
        self.policy = policy or SelectorPolicy()
        self.store = store or RecordStore(session)
        self._builder_slot = _BuilderSlot()

    # -- declared by subclasses ------------------------------------------------

    @abstractmethod
    def entity_type(self) -> Any:
        """The mapped entity type this selector reads."""

    @abstractmethod
    def field_list(self) -> Sequence[Any]:
        """Fields always selected: FieldIdentifiers, names or mapped columns."""

    def field_set_list(self) -> Sequence[FieldSetDescriptor | str] | None:
        """Field sets selected when include_field_sets is enabled."""
        return None

    def order_by_clause(self) -> str:
        """ORDER BY text, rendered verbatim."""
        return self.policy.default_order_by

    # -- builder ---------------------------------------------------------------

    def _new_builder(self) -> FieldListBuilder:
        entity = self.entity_type()
        fields = self.schema.fields(entity, self.field_list() or ())
        field_sets = None
        if self.include_field_sets:
            declared = self.field_set_list()
            if declared is not None:
                field_sets = [self.schema.field_set(entity, fs) for fs in declared]
        entity_name = self.entity_name()
        policy_field = None
        if not self.policy.is_exempt(entity_name):
            # Schema spelling, so it de-duplicates against declared fields.
            # A policy field the entity lacks is kept as configured.
            policy_field = self.schema.find_field(entity, self.policy.policy_field)
        builder = self.policy.new_builder(entity_name, fields, field_sets, policy_field)
        logger.debug(
            "selector_builder_created",
            extra={
                "selector": type(self).__name__,
                "entity": entity_name,
                "variant": type(builder).__name__,
                "field_sets": [fs.name for fs in field_sets or ()],
                "field_count": len(builder),
            },
        )
        return builder

    def builder(self) -> FieldListBuilder:
        """Current builder, created on first access."""
        return self._builder_slot.get_or_create(self._new_builder)

    def set_builder(self, builder: FieldListBuilder) -> None:
        """
        Replace the builder for all future renders, skipping variant selection.

        Raises:
            TypeError: If ``builder`` is not a FieldListBuilder (including None).
        """
        self._builder_slot.replace(builder)
        logger.debug(
            "selector_builder_replaced",
            extra={
                "selector": type(self).__name__,
                "variant": type(builder).__name__,
            },
        )

    def field_list_text(self) -> str:
        return self.builder().render()

    def related_field_list_text(self, relation: str) -> str:
        """Field list with each field prefixed by ``<relation>.``."""
        return self.builder().render(relation)

    # -- metadata --------------------------------------------------------------

    def entity_name(self) -> str:
        return self.schema.entity_name(self.entity_type())

    def entity_label(self) -> str:
        return self.schema.entity_label(self.entity_type())

    def assert_readable(self) -> None:
        """
        Raise if the current caller may not read the entity type.

        Raises:
            AccessDeniedError: Carries the entity's display label.
        """
        entity = self.entity_type()
        if not self.schema.is_readable(entity):
            label = self.schema.entity_label(entity)
            logger.warning(
                "selector_access_denied",
                extra={
                    "selector": type(self).__name__,
                    "entity": self.schema.entity_name(entity),
                },
            )
            raise AccessDeniedError(label)

    # -- queries ---------------------------------------------------------------

    def build_id_query(self) -> str:
        """Render the identifier-scoped query text."""
        return ID_QUERY_TEMPLATE.format(
            fields=self.field_list_text(),
            entity=self.entity_name(),
            order_by=self.order_by_clause(),
        )

    def select_by_ids(self, ids: Iterable[Any]) -> list[Record]:
        """
        Select records by identifier.

        Preconditions: ids is a finite iterable of identifiers.
        Postconditions: Returns every matching record, ordered by
            order_by_clause().  Nothing is returned on failure.

        Raises:
            AccessDeniedError: Before any query is issued.
        """
        ids = list(ids)
        query_text = self.build_id_query()
        with LogContext.bind(selector=type(self).__name__, entity_type=self.entity_name()):
            self.assert_readable()
            records = self.store.query(query_text, ids)
            logger.info(
                "selector_query_executed",
                extra={"id_count": len(ids), "row_count": len(records)},
            )
        return records

    def query_handle_by_ids(
        self,
        ids: Iterable[Any],
        batch_size: int | None = None,
    ) -> QueryHandle:
        """
        Lazy handle over the identifier-scoped query, for batched iteration.

        Raises:
            AccessDeniedError: Before any handle is created.
        """
        ids = list(ids)
        query_text = self.build_id_query()
        with LogContext.bind(selector=type(self).__name__, entity_type=self.entity_name()):
            self.assert_readable()
            handle = self.store.query_handle(query_text, ids, batch_size=batch_size)
            logger.debug(
                "selector_query_handle_created",
                extra={"id_count": len(ids), "batch_size": batch_size},
            )
        return handle
