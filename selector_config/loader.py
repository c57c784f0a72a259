"""
Configuration Loader (``selector_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a typed
``SelectorConfigurationSet``.  Runtime callers use
``selector_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Wrongly shaped values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from selector_config.schema import FieldSetDef, SelectorConfigurationSet


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _names(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, list):
        raise ValueError(f"{key} must be a list of names, got {value!r}")
    return tuple(str(v) for v in value)


def parse_field_sets(data: dict[str, Any]) -> tuple[FieldSetDef, ...]:
    """
    Parse ``field_sets: {Entity: {SetName: [Field, ...]}}``.

    Raises:
        ValueError: if an entity entry is not a mapping or a set is empty.
    """
    result: list[FieldSetDef] = []
    for entity, sets in (data or {}).items():
        if not isinstance(sets, dict):
            raise ValueError(f"field_sets.{entity} must be a mapping, got {sets!r}")
        for name, members in sets.items():
            fields = _names(members, f"field_sets.{entity}.{name}")
            if not fields:
                raise ValueError(f"field_sets.{entity}.{name} has no fields")
            result.append(FieldSetDef(entity=str(entity), name=str(name), fields=fields))
    return tuple(result)


def parse_configuration(data: dict[str, Any]) -> SelectorConfigurationSet:
    """
    Parse a ``SelectorConfigurationSet`` from a dict.

    Preconditions:
        - ``data`` contains ``config_id``, ``version`` and ``policy_field``
          (``policy_field: null`` disables policy injection).
    Raises:
        KeyError: if required keys are missing.
        ValueError: if values are wrongly shaped.
    """
    access = data.get("access", {}) or {}
    readable = access.get("readable")
    return SelectorConfigurationSet(
        config_id=data["config_id"],
        version=int(data["version"]),
        policy_field=data["policy_field"],
        exempt_entity_types=_names(data.get("exempt_entity_types"), "exempt_entity_types"),
        default_order_by=data.get("default_order_by", "Name"),
        readable_entities=None if readable is None else _names(readable, "access.readable"),
        denied_entities=_names(access.get("denied"), "access.denied"),
        field_sets=parse_field_sets(data.get("field_sets", {})),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_configuration(path: Path) -> SelectorConfigurationSet:
    """Load and parse a configuration file."""
    return parse_configuration(load_yaml_file(path))
