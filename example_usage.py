# example_usage.py

import asyncio
import time

from fetch_driver import DriveHooks, DriveOptions, Driver, DriverConfig, to_curl


async def timing(ctx, next):
    start = time.monotonic()
    await next()
    print(f"{ctx.req.method} {ctx.api} -> {ctx.res.status} ({time.monotonic() - start:.3f}s)")


async def print_curl(ctx):
    print(to_curl(ctx.api, ctx.req))


async def main():
    # Создаем драйвер
    config = DriverConfig.create(base_url="https://jsonplaceholder.typicode.com", timeout=10)
    driver = Driver(config=config, hooks=DriveHooks(before_fetch=print_curl))

    # Добавляем middleware
    driver.use("*", timing)

    async with driver:
        print("\n=== GET ===")
        post = await driver.drive.get("/posts/1")
        print(f"Title: {post['title']}")

        print("\n=== POST ===")
        created = await driver.drive.post("/posts", {"title": "Test Post", "body": "This is a test", "userId": 1})
        print(f"Created ID: {created['id']}")

        print("\n=== Download with progress ===")
        ctx = await driver.request(DriveOptions(
            api="/photos",
            receiver=lambda event: print(f"  {event.percentage:.0f}%"),
        ))
        # тело уже прочитано драйвером: и в режиме прогресса, и при декодировании
        data = ctx.res.raw.content
        print(f"Received {len(data)} bytes")


if __name__ == "__main__":
    asyncio.run(main())
