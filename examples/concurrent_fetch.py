"""
Concurrent Fetches
==================

A Client holds no connections, so one instance can drive many requests
at once from a task group. Each request still gets its own connection.
"""

import time

import anyio

import minihttp


async def main() -> None:
    client = minihttp.Client()
    urls = [f"http://httpbin.org/get?id={i}" for i in range(10)]
    results: list[tuple[str, int]] = []

    async def fetch_one(url: str) -> None:
        try:
            response = await client.get(url)
        except minihttp.HTTPError as exc:
            print(f"  {url}: {type(exc).__name__}: {exc}")
            return
        results.append((url, response.status_code))

    start = time.perf_counter()
    async with anyio.create_task_group() as tg:
        for url in urls:
            tg.start_soon(fetch_one, url)
    elapsed = time.perf_counter() - start

    for url, status in sorted(results):
        print(f"  {status}  {url}")
    print(f"{len(results)}/{len(urls)} succeeded in {elapsed:.2f}s")


if __name__ == "__main__":
    anyio.run(main)
