"""
Configuration loader (``storage_config.loader``).

Responsibility
--------------
Reads a YAML configuration set and parses it into ``storage_config.schema``
dataclasses.  Callers outside this package go through
``storage_config.get_active_config()``.

Invariants enforced
-------------------
* A missing ``database.url`` is an error; every other key has a default.
* ``compute_checksum`` is deterministic for equal parsed content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``database`` section or url  -> ``KeyError`` propagates.
* Wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from storage_config.schema import DatabaseConfig, LoggingConfig, StorageConfig

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _int_setting(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"database.{key} must be a non-negative integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    url = data["url"]
    if not isinstance(url, str) or not url.strip():
        raise ValueError(f"database.url must be a non-empty string, got {url!r}")
    echo = data.get("echo", False)
    if not isinstance(echo, bool):
        raise ValueError(f"database.echo must be a boolean, got {echo!r}")
    return DatabaseConfig(
        url=url.strip(),
        echo=echo,
        pool_size=_int_setting(data, "pool_size", 20),
        max_overflow=_int_setting(data, "max_overflow", 10),
        pool_timeout=_int_setting(data, "pool_timeout", 30),
        pool_recycle=_int_setting(data, "pool_recycle", 1800),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown logging.level {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any], database_url: str | None = None) -> StorageConfig:
    """
    Parse a StorageConfig from a loaded YAML dict.

    ``database_url``, when given, replaces ``database.url`` before parsing
    so the checksum describes the configuration actually in effect.
    """
    database = dict(data["database"])
    if database_url:
        database["url"] = database_url
    effective = {**data, "database": database}
    return StorageConfig(
        name=str(data.get("name", "default")),
        database=parse_database(database),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(effective),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
