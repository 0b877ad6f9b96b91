import asyncio
import os
import sys

# Add backend directory to path so we can import crewboard modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from crewboard.db.database import engine, Base, AsyncSessionLocal
from crewboard.db.models import user, post, game, chat_data  # noqa: F401
from crewboard.services import game_service

async def reset_database():
    print("Dropping all tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    print("Tables re-created.")

    print("Seeding verified games...")
    async with AsyncSessionLocal() as session:
        created = await game_service.seed_verified_games(session)
    print(f"Seeding complete ({created} games).")

if __name__ == "__main__":
    try:
        asyncio.run(reset_database())
    except Exception as e:
        print(f"Error during reset: {e}")
        sys.exit(1)
