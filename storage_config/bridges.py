"""
Config -> kernel bridges.

Turns a StorageConfig into a wired PlacementEngine.  Lives here because the
kernel never imports storage_config.

Usage:
    from storage_config import get_active_config
    from storage_config.bridges import build_placement_engine

    engine = build_placement_engine(get_active_config())
"""

from __future__ import annotations

from storage_config.schema import StorageConfig
from storage_kernel.db.engine import get_session_factory, init_engine_from_url
from storage_kernel.db.immutability import register_immutability_listeners
from storage_kernel.logging_config import configure_logging
from storage_kernel.services.placement_engine import PlacementEngine


def build_placement_engine(config: StorageConfig) -> PlacementEngine:
    """Configure logging and the database, then return a PlacementEngine."""
    configure_logging(level=config.logging.level)
    db = config.database
    init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
    register_immutability_listeners()
    return PlacementEngine(session_factory=get_session_factory())
