from __future__ import annotations

import asyncio
import json
import logging

from zaguan import ToolCall, ZaguanClient

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

WEATHER_TOOL: dict[str, object] = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Get the current weather in a given location",
        "parameters": {
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "City, e.g. Paris",
                },
            },
            "required": ["location"],
        },
    },
}


def run_local_tool(call: ToolCall) -> str:
    args = json.loads(call.function.arguments or "{}")
    logger.info("Running %s with %s", call.function.name, args)
    return json.dumps({"location": args.get("location"), "temperature_c": 18})


async def main():
    messages: list[dict] = [{"role": "user", "content": "What's the weather in Paris?"}]
    request = {"model": "openai/gpt-4o", "messages": messages, "tools": [WEATHER_TOOL]}

    async with ZaguanClient() as client:
        # stream=True: the answer is streamed and rebuilt, tool calls included
        response = await client.chat({**request, "stream": True})
        message = response.message

        if not message.tool_calls:
            print(response.content)
            return

        messages.append(message.model_dump(mode="json", exclude_none=True))
        for call in message.tool_calls:
            messages.append(
                {"role": "tool", "tool_call_id": call.id, "content": run_local_tool(call)}
            )

        final = await client.chat(request)
        print(final.content)


if __name__ == "__main__":
    asyncio.run(main())
