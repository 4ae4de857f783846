import asyncio

from zaguan import ZaguanClient


async def main():
    async with ZaguanClient() as client:
        message = await client.messages(
            {
                "model": "anthropic/claude-3-5-sonnet",
                "max_tokens": 512,
                "system": "You are a concise assistant.",
                "messages": [{"role": "user", "content": "Name three prime numbers."}],
            }
        )

        for block in message.content:
            if block.type == "text":
                print(block.text)
        print("Usage: ", message.usage)


if __name__ == "__main__":
    asyncio.run(main())
