"""
Create all tables for the configured DATABASE_URL.

  python -m eduwise.db.init_db
"""
import asyncio

from eduwise.db.session import create_tables, engine


async def main() -> None:
    await create_tables(engine)
    await engine.dispose()
    print("Tables created.")


if __name__ == "__main__":
    asyncio.run(main())
