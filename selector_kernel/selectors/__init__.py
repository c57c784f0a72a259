"""Selectors for the selector kernel (read side)."""

from selector_kernel.selectors.base import BaseSelector
from selector_kernel.selectors.field_list import (
    DEFAULT_EXEMPT_ENTITY_TYPES,
    DEFAULT_POLICY_FIELD,
    FieldListBuilder,
    PolicyFieldListBuilder,
    SelectorPolicy,
)
from selector_kernel.selectors.registry import (
    SelectorRegistry,
    get_default_registry,
    register_selector,
)

__all__ = [
    "BaseSelector",
    "FieldListBuilder",
    "PolicyFieldListBuilder",
    "SelectorPolicy",
    "DEFAULT_EXEMPT_ENTITY_TYPES",
    "DEFAULT_POLICY_FIELD",
    "SelectorRegistry",
    "get_default_registry",
    "register_selector",
]
