"""
Selector registry.

Maps entity types to the selector class that reads them, so callers can
select records of an entity type without naming its selector.
"""

from collections.abc import Callable, Iterable
from typing import Any

from sqlalchemy.orm import Session

from selector_kernel.exceptions import SelectorNotRegisteredError
from selector_kernel.schema.describe import SchemaDescribe
from selector_kernel.selectors.base import BaseSelector
from selector_kernel.store import Record


class SelectorRegistry:
    """
    Registry for selector classes, keyed by entity type.

    Registering a second selector for the same entity type replaces the
    first.
    """

    def __init__(self):
        self._selectors: dict[Any, type[BaseSelector]] = {}

    def register(self, entity_type: Any, selector_cls: type[BaseSelector]) -> None:
        self._selectors[entity_type] = selector_cls

    def get(self, entity_type: Any) -> type[BaseSelector]:
        """
        Get the selector class for an entity type.

        Raises:
            SelectorNotRegisteredError: If no selector is registered.
        """
        try:
            return self._selectors[entity_type]
        except KeyError:
            name = getattr(entity_type, "__name__", str(entity_type))
            raise SelectorNotRegisteredError(name) from None

    def new_selector(
        self,
        entity_type: Any,
        session: Session,
        schema: SchemaDescribe,
        **kwargs: Any,
    ) -> BaseSelector:
        """Instantiate the registered selector for an entity type."""
        return self.get(entity_type)(session, schema, **kwargs)

    def select_by_ids(
        self,
        entity_type: Any,
        session: Session,
        schema: SchemaDescribe,
        ids: Iterable[Any],
        **kwargs: Any,
    ) -> list[Record]:
        """Select records of an entity type through its registered selector."""
        return self.new_selector(entity_type, session, schema, **kwargs).select_by_ids(ids)

    def list_entity_types(self) -> list[Any]:
        return list(self._selectors.keys())


# Global default registry
_default_registry = SelectorRegistry()


def get_default_registry() -> SelectorRegistry:
    """Get the default selector registry."""
    return _default_registry


def register_selector(entity_type: Any) -> Callable[[type[BaseSelector]], type[BaseSelector]]:
    """
    Class decorator registering a selector in the default registry.

    Usage::

        @register_selector(Account)
        class AccountSelector(BaseSelector):
            ...
    """

    def decorator(selector_cls: type[BaseSelector]) -> type[BaseSelector]:
        _default_registry.register(entity_type, selector_cls)
        return selector_cls

    return decorator
