import asyncio
import logging

from zaguan import ZaguanClient, extract_thinking

logging.basicConfig(level=logging.INFO)

REQUEST = {
    "model": "deepseek/deepseek-reasoner",
    "messages": [{"role": "user", "content": "Is 1001 prime? Answer briefly."}],
}


async def main():
    async with ZaguanClient() as client:
        chunks = []
        async with client.chat_stream(REQUEST) as stream:
            async for chunk in stream:
                chunks.append(chunk)
                if chunk.choices:
                    print(chunk.choices[0].delta.content or "", end="", flush=True)
        print()

        response = ZaguanClient.reconstruct_message_from_chunks(chunks)
        split = extract_thinking(response.content or "")
        if split.thinking:
            print("Reasoning:\n", split.thinking)
        print("Answer:\n", split.response)

        if ZaguanClient.has_reasoning_tokens(response.usage):
            details = response.usage.completion_tokens_details
            print("Reasoning tokens: ", details.reasoning_tokens)


if __name__ == "__main__":
    asyncio.run(main())
