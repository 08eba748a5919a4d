#!/usr/bin/env python3
"""
Create the storage schema for a configuration set, optionally dropping it
first and creating a root location to store into.

Usage:
  python3 scripts/init_db.py [--config PATH] [--drop] [--root NAME --rows R --columns C]

The database url comes from the config set, or STORAGE_DATABASE_URL.
"""

import argparse
import sys

from storage_config import get_active_config
from storage_config.bridges import build_placement_engine
from storage_kernel.db.engine import create_tables, drop_tables
from storage_kernel.domain.dtos import LocationInput, RequestContext
from storage_kernel.domain.values import GridDirection, Size
from storage_kernel.exceptions import StorageKernelError


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create the storage schema")
    p.add_argument("--config", default=None, help="Configuration set YAML (default: bundled default.yaml)")
    p.add_argument("--drop", action="store_true", help="Drop all tables before creating them")
    p.add_argument("--root", default=None, help="Name of a root location to create")
    p.add_argument("--rows", type=int, default=None, help="Rows in the root location's grid")
    p.add_argument("--columns", type=int, default=None, help="Columns in the root location's grid")
    p.add_argument("--user", default="admin", help="Username recorded for the root location")
    return p.parse_args()


def main() -> int:
    args = _parse_args()
    if (args.rows is None) != (args.columns is None):
        print("  ERROR: --rows and --columns go together.", file=sys.stderr)
        return 2

    config = get_active_config(args.config)
    engine = build_placement_engine(config)
    print(f"  Config:   {config.name} ({config.checksum[:12]})")

    if args.drop:
        drop_tables()
        print("  Dropped all tables.")
    create_tables()
    print("  Created tables.")

    if args.root:
        try:
            size = Size(args.rows, args.columns) if args.rows is not None else None
            info = engine.create_location(
                RequestContext(app="init_db", username=args.user),
                LocationInput(
                    name=args.root,
                    size=size,
                    direction=GridDirection.RIGHT_DOWN if size is not None else None,
                ),
            )
        except (StorageKernelError, ValueError) as exc:
            print(f"  ERROR: {exc}", file=sys.stderr)
            return 1
        print(f"  Created root location {info.qualified_label} ({info.barcode}, id={info.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
