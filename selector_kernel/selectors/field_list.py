"""
Module: selector_kernel.selectors.field_list
Responsibility: Field-list assembly for selector queries.  Composes an
    ordered, de-duplicated field list from explicit fields and field-set
    expansions, optionally injects the policy field, and renders it as query
    text with or without a relation prefix.
Architecture position: Kernel > Selectors.  May import from schema/.
    MUST NOT import from store or selectors/base.py.

Invariants enforced:
    - Each field appears at most once, at its first-seen position across
      (base fields, then field sets in order, then members in order).
    - The field list is fixed at construction; render() never mutates it.
    - PolicyFieldListBuilder adds the policy field last, exactly once, and
      never duplicates a field already present.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from selector_kernel.schema.fields import FieldIdentifier, FieldSetDescriptor

DEFAULT_POLICY_FIELD = "CurrencyIsoCode"

# Entity types that never receive the policy field.
DEFAULT_EXEMPT_ENTITY_TYPES: frozenset[str] = frozenset({"AsyncApexJob"})

DEFAULT_ORDER_BY = "Name"


class FieldListBuilder:
    """
    Ordered, de-duplicated field list rendered as comma-joined query text.

    A ``None`` base list is valid and renders as an empty string.
    """

    def __init__(
        self,
        fields: Sequence[FieldIdentifier] | None,
        field_sets: Sequence[FieldSetDescriptor] | None = None,
    ):
        # dict keeps insertion order and gives set-like membership
        self._fields: dict[FieldIdentifier, None] = {}
        self._add_all(fields or ())
        for field_set in field_sets or ():
            self._add_all(field_set.expand())

    def _add_all(self, fields: Iterable[FieldIdentifier]) -> None:
        for f in fields:
            self._add(FieldIdentifier.of(f))

    def _add(self, f: FieldIdentifier) -> None:
        self._fields.setdefault(f, None)

    @property
    def fields(self) -> tuple[FieldIdentifier, ...]:
        return tuple(self._fields)

    def __iter__(self) -> Iterator[FieldIdentifier]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            item = FieldIdentifier(item)
        return item in self._fields

    def render(self, relation: str | None = None) -> str:
        """
        Render the field list as query text.

        Args:
            relation: Optional relationship name; each field is rendered as
                ``<relation>.<field>``.
        """
        if relation:
            return ",".join(f"{relation}.{f.name}" for f in self._fields)
        return ",".join(f.name for f in self._fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.render()!r})"


class PolicyFieldListBuilder(FieldListBuilder):
    """FieldListBuilder that also selects the policy field."""

    def __init__(
        self,
        fields: Sequence[FieldIdentifier] | None,
        field_sets: Sequence[FieldSetDescriptor] | None = None,
        policy_field: FieldIdentifier | str = DEFAULT_POLICY_FIELD,
    ):
        super().__init__(fields, field_sets)
        self.policy_field = FieldIdentifier.of(policy_field)
        self._add(self.policy_field)


@dataclass(frozen=True)
class SelectorPolicy:
    """
    Cross-cutting field policy for selectors.

    Contract:
        ``new_builder`` picks the plain builder for exempt entity types
        (or when no policy field is configured) and the policy builder for
        everything else.
    """

    policy_field: str | None = DEFAULT_POLICY_FIELD
    exempt_entity_types: frozenset[str] = field(
        default_factory=lambda: DEFAULT_EXEMPT_ENTITY_TYPES
    )
    default_order_by: str = DEFAULT_ORDER_BY

    def is_exempt(self, entity_name: str) -> bool:
        return self.policy_field is None or entity_name in self.exempt_entity_types

    def new_builder(
        self,
        entity_name: str,
        fields: Sequence[FieldIdentifier] | None,
        field_sets: Sequence[FieldSetDescriptor] | None = None,
        policy_field: FieldIdentifier | None = None,
    ) -> FieldListBuilder:
        """
        Instantiate the builder variant that applies to entity_name.

        ``policy_field`` is the policy field already resolved against the
        entity's schema; when omitted the configured name is used as written.
        """
        if self.is_exempt(entity_name):
            return FieldListBuilder(fields, field_sets)
        return PolicyFieldListBuilder(
            fields, field_sets, policy_field=policy_field or self.policy_field
        )
