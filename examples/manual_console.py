import asyncio
import logging
import os

from infinispan_console_py import (
    CacheService,
    ContentType,
    RestClient,
    StaticTokenProvider,
    get_content_type_options,
)

logging.basicConfig(level=logging.INFO)

ENDPOINT = os.environ.get("INFINISPAN_ENDPOINT", "http://localhost:11222/rest/v2")


async def walk_cache(cache_name: str):
    """Print what the console would show for one cache"""
    print(f"=== Cache {cache_name} ===\n")

    token = os.environ.get("INFINISPAN_TOKEN")
    async with RestClient(
        ENDPOINT, token_provider=StaticTokenProvider(token) if token else None
    ) as client:
        service = CacheService(client)

        detail = await service.retrieve_full_detail(cache_name)
        if detail.is_left():
            print(f"✗ {detail.value.message}")
            return

        cache = detail.value
        print(f"Type: {cache.type}")
        print(f"Encoding: key={cache.encoding.key.value} value={cache.encoding.value.value}")
        print(f"Editable: {'✓' if cache.editable else '✗'}")
        options = ", ".join(c.value for c in get_content_type_options(cache.encoding.value))
        print(f"Value content types: {options or '-'}")
        if cache.stats:
            print(f"Hits/misses: {cache.stats.hits}/{cache.stats.misses}")

        print("\n--- Entries ---")
        entries = await service.get_entries(cache_name, cache.encoding, 10)
        if entries.is_left():
            print(f"✗ {entries.value.message}")
        else:
            for entry in entries.value:
                print(f"{entry.key} ({entry.key_content_type}) = {entry.value}")

        if cache.editable:
            print("\n--- Writing an entry ---")
            written = await service.create_or_update(
                cache_name, "console-example", ContentType.STRING, "hello", ContentType.STRING,
                time_to_live="60",
            )
            print(f"{'✓' if written.success else '✗'} {written.message}")

            read = await service.get_entry(cache_name, "console-example", ContentType.STRING)
            print(f"Read back: {read.value}")


if __name__ == "__main__":
    asyncio.run(walk_cache(os.environ.get("INFINISPAN_CACHE", "default")))
