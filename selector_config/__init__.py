"""
selector_config -- single public entrypoint for selector configuration.

Responsibility:
    Provides ``get_active_config()``, the only way runtime code obtains
    selector configuration.  YAML loading is internal tooling; bridges
    translate the parsed set into kernel inputs.

Architecture position:
    Configuration.  Sits above ``selector_kernel``; the kernel MUST NEVER
    import from ``selector_config``.

Failure modes:
    - ``FileNotFoundError`` -- configuration file missing.
    - ``KeyError`` / ``ValueError`` -- malformed configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

from selector_config.loader import load_configuration
from selector_config.schema import FieldSetDef, SelectorConfigurationSet

_logger = logging.getLogger("selector_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "FieldSetDef",
    "SelectorConfigurationSet",
    "get_active_config",
]


def get_active_config(config_path: Path | None = None) -> SelectorConfigurationSet:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - A ``SELECTOR_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Args:
        config_path: Override path to a configuration file.  Defaults to
            the packaged ``sets/default.yaml``.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        KeyError: If required keys are missing.
        ValueError: If values are wrongly shaped.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    config = load_configuration(path)

    _logger.info(
        "SELECTOR_CONFIG_TRACE",
        extra={
            "trace_type": "SELECTOR_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_version": config.version,
            "config_checksum": config.checksum,
            "policy_field": config.policy_field,
            "exempt_entity_types": list(config.exempt_entity_types),
            "field_set_count": len(config.field_sets),
        },
    )
    return config
