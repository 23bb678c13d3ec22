"""
Basic Usage
===========

One GET and one POST against httpbin.org. Every call opens its own
connection, sends a single request and reads until the server hangs up.
"""

import anyio

import minihttp


async def main() -> None:
    # ── GET ──────────────────────────────────────────────────────────────
    print("Making GET request...")
    response = await minihttp.get("http://httpbin.org/get")

    print(f"Status:  {response.status_code}")
    print(f"Success: {response.is_success}")

    content_type = response.header("content-type")
    if content_type is not None:
        print(f"Content-Type: {content_type}")

    if response.body is not None:
        print(f"Response body: {response.body}")

    # ── POST with a JSON body ────────────────────────────────────────────
    print("\nMaking POST request...")
    post_data = {
        "name": "John Doe",
        "email": "john@example.com",
    }
    post_response = await minihttp.post("http://httpbin.org/post", post_data)

    print(f"POST Status: {post_response.status_code}")
    if post_response.body is not None:
        print(f"POST Response: {post_response.body}")


if __name__ == "__main__":
    anyio.run(main)
