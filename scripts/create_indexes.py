import asyncio
import os
import sys

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from accounts_api.config import get_settings
from accounts_api.infrastructure.database import close_client, ensure_indexes, get_database


async def migrate():
    settings = get_settings()
    print(f"Creating indexes on {settings.MONGODB_DB}...")
    try:
        await ensure_indexes(get_database())
        print("Indexes created/verified.")
    finally:
        close_client()


if __name__ == "__main__":
    asyncio.run(migrate())
