# scripts/init_db.py

import sys
from pathlib import Path

from sqlalchemy import text

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from app.config.settings import get_settings
from app.infrastructure.database import models  # noqa: F401  registers UserRow on Base
from app.infrastructure.database.session import Base, create_engine


async def init_db():
    engine = create_engine(get_settings().database_url)
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            print("DB Connected:", result.scalar())
            await conn.run_sync(Base.metadata.create_all)
            print("Tables:", ", ".join(sorted(Base.metadata.tables)))
    finally:
        await engine.dispose()


asyncio.run(init_db())
