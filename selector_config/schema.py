"""
SelectorConfigurationSet schema.

The human-authored, reviewable source artifact for selector policy.  YAML
files are parsed into these frozen types by the loader and translated into
kernel inputs by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldSetDef:
    """A named group of fields on one entity type."""

    entity: str
    name: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class SelectorConfigurationSet:
    """Selector policy and schema configuration."""

    config_id: str
    version: int
    policy_field: str | None
    exempt_entity_types: tuple[str, ...] = ()
    default_order_by: str = "Name"
    readable_entities: tuple[str, ...] | None = None
    denied_entities: tuple[str, ...] = ()
    field_sets: tuple[FieldSetDef, ...] = ()
    checksum: str = ""
