"""
Storage configuration schema.

Frozen dataclasses the loader parses YAML into.  ``StorageConfig`` is the
only artifact handed to the rest of the system.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class StorageConfig:
    """A loaded configuration set."""

    name: str
    database: DatabaseConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
