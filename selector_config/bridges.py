"""
Config -> Kernel Bridges.

Functions that convert a SelectorConfigurationSet into kernel inputs.  These
live in selector_config because the kernel must never import selector_config.

Usage:
    from selector_config.bridges import build_schema_describe, build_selector_policy

    config = get_active_config()
    schema = build_schema_describe(config)
    selector = AccountSelector(session, schema, policy=build_selector_policy(config))
"""

from __future__ import annotations

from selector_config.schema import SelectorConfigurationSet
from selector_kernel.schema.describe import AccessPolicy, SchemaDescribe
from selector_kernel.selectors.field_list import SelectorPolicy


def build_selector_policy(config: SelectorConfigurationSet) -> SelectorPolicy:
    """Build the kernel SelectorPolicy (policy field, exemptions, order-by)."""
    return SelectorPolicy(
        policy_field=config.policy_field,
        exempt_entity_types=frozenset(config.exempt_entity_types),
        default_order_by=config.default_order_by,
    )


def build_access_policy(config: SelectorConfigurationSet) -> AccessPolicy:
    """Build the caller's AccessPolicy from the access section."""
    readable = config.readable_entities
    return AccessPolicy(
        readable=None if readable is None else frozenset(readable),
        denied=frozenset(config.denied_entities),
    )


def build_schema_describe(config: SelectorConfigurationSet) -> SchemaDescribe:
    """Build a SchemaDescribe with the configured field sets and access policy."""
    field_sets: dict[str, dict[str, list[str]]] = {}
    for fs in config.field_sets:
        field_sets.setdefault(fs.entity, {})[fs.name] = list(fs.fields)
    return SchemaDescribe(
        access_policy=build_access_policy(config),
        field_sets=field_sets,
    )
