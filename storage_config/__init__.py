"""
storage_config -- single public entrypoint for storage configuration.

Responsibility:
    ``get_active_config()`` is the only way the rest of the system obtains
    configuration.  No other component reads configuration files or
    environment variables directly.

Architecture position:
    Configuration.  Sits beside ``storage_kernel``; the kernel MUST NEVER
    import from ``storage_config``.  ``bridges`` turns a loaded config into
    kernel objects.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.

Audit relevance:
    Every successful call emits a ``storage_config_loaded`` log entry with
    the set name and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from storage_config.loader import load_yaml_file, parse_config
from storage_config.schema import DatabaseConfig, LoggingConfig, StorageConfig
from storage_kernel.logging_config import get_logger

__all__ = [
    "DATABASE_URL_ENV",
    "DEFAULT_CONFIG_PATH",
    "DatabaseConfig",
    "LoggingConfig",
    "StorageConfig",
    "get_active_config",
]

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

DATABASE_URL_ENV = "STORAGE_DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> StorageConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML configuration set to load.  Defaults to the bundled
            ``sets/default.yaml``.

    Returns:
        The parsed StorageConfig.  ``STORAGE_DATABASE_URL``, when set and
        non-empty, replaces the configured database url.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(config_path)
    config = parse_config(data, database_url=os.environ.get(DATABASE_URL_ENV))
    _logger.info(
        "storage_config_loaded",
        extra={
            "config_name": config.name,
            "config_path": str(config_path),
            "checksum": config.checksum,
            "dialect": config.database.url.split(":", 1)[0],
        },
    )
    return config
