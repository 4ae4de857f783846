import asyncio

from zaguan import ChatMessage, ChatRequest, ChatResponse, RequestOptions, ZaguanClient


async def chat_example_from_env():
    # ZAGUAN_API_KEY and ZAGUAN_BASE_URL are read from the environment / .env
    async with ZaguanClient() as client:
        request = ChatRequest(
            model="openai/gpt-4o-mini",
            messages=[
                ChatMessage(role="system", content="You are a helpful assistant."),
                ChatMessage(role="user", content="What's your name?"),
            ],
            max_tokens=1000,
            temperature=0.7,
        )

        response: ChatResponse = await client.chat(request)

        print("Response: ", response.content)
        print("Usage: ", response.usage)


async def chat_example_explicit_config():
    client = ZaguanClient(
        "https://api.zaguan.example.com",
        "your-api-key",
        timeout=10,
    )
    try:
        response = await client.chat(
            {
                "model": "anthropic/claude-3-5-sonnet",
                "messages": [{"role": "user", "content": "Say hi in three languages."}],
            },
            options=RequestOptions(request_id="example-request-1"),
        )
        print("Anthropic via Zaguán: ", response.content)
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(chat_example_from_env())
    asyncio.run(chat_example_explicit_config())
