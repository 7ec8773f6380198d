"""
estate_config -- single public entrypoint for configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain configuration at
    runtime. It returns a frozen ``EstateConfig``: company defaults, alert
    windows, store key, and the import vocabulary (sheet marker tokens and
    column aliases).

Architecture position:
    Sits above ``estate_kernel`` and beside ``estate_ingestion``. The kernel
    domain never imports from here; services receive config values by
    injection.

Failure modes:
    - ``FileNotFoundError`` -- the requested config file does not exist.
    - ``InvalidConfigError`` -- schema validation failed.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from estate_config.loader import load_config
from estate_config.schema import (
    AlertPolicy,
    ColumnAliases,
    EstateConfig,
    ImportVocabulary,
    SheetMarkers,
    StoreDefaults,
)
from estate_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "estate.yaml"


@lru_cache(maxsize=8)
def _load_cached(path: Path) -> EstateConfig:
    return load_config(path)


def get_active_config(config_path: Path | None = None) -> EstateConfig:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned config passed schema validation.
        - An ``ESTATE_CONFIG_TRACE`` log entry is emitted on every call.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    config = _load_cached(path.resolve())
    _logger.info(
        "ESTATE_CONFIG_TRACE",
        extra={
            "config_path": str(path),
            "checksum": config.checksum,
            "closing_day": config.closing_day,
            "storage_key": config.store.storage_key,
        },
    )
    return config


__all__ = [
    "AlertPolicy",
    "ColumnAliases",
    "EstateConfig",
    "ImportVocabulary",
    "SheetMarkers",
    "StoreDefaults",
    "get_active_config",
]
