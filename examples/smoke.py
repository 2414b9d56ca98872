import asyncio

from llm_gateway.config import GatewaySettings
from llm_gateway.gateway import Gateway
from llm_gateway.types import StreamChunk, Turn


async def main() -> None:
    async with Gateway(settings=GatewaySettings.from_env()) as gateway:
        print("Providers:", ", ".join(gateway.list_providers()))

        # Fails fast without touching the network
        try:
            gateway.generate_streaming("cohere", "command-r", [])
        except Exception as e:
            print("Expected error:", type(e).__name__, e)

        turns = [Turn(role="user", content="Say hello in five words.")]
        async for event in gateway.generate_streaming("openai", "gpt-4o-mini", turns):
            if isinstance(event, StreamChunk):
                print(event.text, end="", flush=True)
            else:
                print(f"\n[{event.type}]")


if __name__ == "__main__":
    asyncio.run(main())
