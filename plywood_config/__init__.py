"""
plywood_config -- single public entrypoint for plant configuration.

Responsibility:
    Provides the ONLY way to obtain plant configuration at runtime through
    ``get_active_config()``.  Returns a validated, frozen ``PlantConfig``:
    warehouse role bindings, press-dryer machines, plywood types and the
    yield policy.

Architecture position:
    Configuration -- sits above ``plywood_kernel``.  The kernel never
    imports from ``plywood_config``; callers pass the PlantConfig (or the
    values taken from it) into kernel components at construction time.

Failure modes:
    - ``ConfigurationError`` -- missing file, malformed YAML, or any
      structural validation failure.  Fatal: raised at startup, never per
      request.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``plywood_config_loaded`` log entry carrying the plant id, version and
    checksum, tying recorded ledger rows to the configuration in force.
"""

from __future__ import annotations

import os
from pathlib import Path

from plywood_config.loader import load_plant_config
from plywood_config.schema import MachineDef, PlantConfig, WarehouseDef
from plywood_config.validator import ConfigValidationResult, validate_plant_config
from plywood_kernel.exceptions import ConfigurationError
from plywood_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_PATH_ENV = "PLYWOOD_CONFIG"

__all__ = [
    "get_active_config",
    "PlantConfig",
    "WarehouseDef",
    "MachineDef",
    "ConfigValidationResult",
    "validate_plant_config",
    "DEFAULT_CONFIG_PATH",
]


def get_active_config(config_path: Path | str | None = None) -> PlantConfig:
    """
    The ONLY public configuration entrypoint.

    Resolution order: explicit ``config_path``, then the ``PLYWOOD_CONFIG``
    environment variable, then the bundled ``sets/default.yaml``.

    Returns:
        A validated PlantConfig.

    Raises:
        ConfigurationError: If the file cannot be loaded or fails
            validation.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    path = Path(config_path)

    config = load_plant_config(path)

    validation = validate_plant_config(config)
    if not validation.is_valid:
        raise ConfigurationError(
            "Plant configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors),
            key=str(path),
        )

    _logger.info(
        "plywood_config_loaded",
        extra={
            "plant_id": config.plant_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "yield_policy": config.yield_policy.value,
            "machine_count": len(config.machines),
            "config_path": str(path),
        },
    )
    return config
