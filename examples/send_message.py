"""Post a message through a running relay."""

import asyncio

from httpx import AsyncClient


async def main() -> None:
    async with AsyncClient(base_url="http://localhost:3000") as client:
        response = await client.post("/api/slack/send", json={"text": "Standup done"})
        print(response.status_code, response.json())


if __name__ == "__main__":
    asyncio.run(main())
