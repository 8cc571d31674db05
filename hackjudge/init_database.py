import asyncio
from hackjudge.db import engine
from hackjudge.init_db import init_database


async def init():
    await init_database(engine)


if __name__ == "__main__":
    asyncio.run(init())
