#!/usr/bin/env python3
"""Script to check database connectivity with the configured ORM backend.

Usage:
    python db_health.py              # backend from DATABASE_ORM
    python db_health.py --orm asyncpg

Exits 0 when the database is reachable and healthy, 1 otherwise.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from pgbridge.adapters.base import DatabaseAdapter
from pgbridge.adapters.factory import DatabaseFactory
from pgbridge.core.config import settings
from pgbridge.core.error_utils import safe_url, truncate_error_message

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


async def close_adapter(adapter: DatabaseAdapter) -> None:
    """Disconnect, reporting rather than raising close errors."""
    try:
        await adapter.disconnect()
    except Exception as e:
        print(f"Disconnect failed: {truncate_error_message(e)}")


async def check_database(orm: Optional[str] = None) -> bool:
    """Connect, probe and print database info. Returns True when healthy."""
    factory = DatabaseFactory(settings)

    try:
        adapter = factory.create_adapter_by_type(orm) if orm else factory.create_adapter()
    except Exception as e:
        print(f"Configuration error: {truncate_error_message(e)}")
        return False

    print(f"ORM backend: {adapter.orm_type.value}")
    print(f"Database:    {safe_url(adapter.get_config().connection_string)}")

    try:
        await adapter.connect()
    except Exception as e:
        print(f"Connection failed: {truncate_error_message(e)}")
        # connect() keeps the client when only the probe failed
        await close_adapter(adapter)
        return False

    try:
        healthy = await adapter.health_check()
        info = await adapter.get_database_info()

        print(f"Status:      {adapter.get_status().value}")
        if info:
            print(f"Name:        {info.database_name}")
            print(f"User:        {info.current_user}")
            print(f"Version:     {info.postgres_version}")
        return healthy
    finally:
        await close_adapter(adapter)


def main() -> int:
    parser = argparse.ArgumentParser(description="Check database health")
    parser.add_argument(
        "--orm",
        choices=["sqlalchemy", "asyncpg"],
        help="Override DATABASE_ORM for this check",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("DATABASE HEALTH")
    print("=" * 60)
    healthy = asyncio.run(check_database(args.orm))
    print("\n" + ("✓ healthy" if healthy else "✗ unhealthy"))
    return 0 if healthy else 1


if __name__ == "__main__":
    sys.exit(main())
