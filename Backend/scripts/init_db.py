#!/usr/bin/env python3
"""
Initialize the storefront database schema using SQLAlchemy models.

Creates all tables and, with --seed, the demo stores ("bombay" active,
"kathmandu-crafts" pending). Safe to run multiple times (idempotent).

Usage:
    export DATABASE_URL="postgresql+asyncpg://localhost:5432/storefront"
    python3 Backend/scripts/init_db.py --seed
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add Backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.core.db import Base, build_engine
from storefront.seed import seed_demo_data
import storefront.models  # noqa: F401  (registers the tables on Base.metadata)


async def init_db(database_url: str, seed: bool):
    """Create all tables, then optionally seed."""
    print(f"🔧 Initializing storefront database...")
    print(f"   Database: {database_url}")

    engine = build_engine(database_url)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        print("✅ Schema initialized successfully!")
        print("\n📋 Tables:")
        for table in Base.metadata.sorted_tables:
            print(f"   - {table.name}")

        if seed:
            session_factory = async_sessionmaker(engine, expire_on_commit=False)
            async with session_factory() as session:
                await seed_demo_data(session)
            print("\n🌱 Demo stores seeded")
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create storefront tables")
    parser.add_argument("--seed", action="store_true", help="Insert the demo stores")
    args = parser.parse_args()

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("❌ ERROR: DATABASE_URL environment variable not set")
        print("   Use: export DATABASE_URL='postgresql+asyncpg://localhost:5432/storefront'")
        sys.exit(1)

    asyncio.run(init_db(database_url, args.seed))


if __name__ == "__main__":
    main()
