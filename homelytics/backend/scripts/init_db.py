# scripts/init_db.py
import asyncio

from app.config import settings
from app.db import engine
from app.models import Base


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    tables = ", ".join(sorted(Base.metadata.tables))
    print(f"OK: homelytics schema ready at {settings.HOMELYTICS_DB_URL} ({tables})")


if __name__ == "__main__":
    asyncio.run(main())
