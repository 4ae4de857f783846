import asyncio

from zaguan import APIError, InsufficientCreditsError, RateLimitError, ZaguanClient


async def main():
    async with ZaguanClient() as client:
        balance = await client.get_credits_balance()
        print(f"Tier {balance.tier}: {balance.credits_remaining} credits, bands {balance.bands}")

        history = await client.get_credits_history(page=1, page_size=5)
        for entry in history.entries:
            print(entry.timestamp, entry.model, entry.credits_debited)

        stats = await client.get_credits_stats(group_by="day")
        print("Total credits used: ", stats.summary.total_credits)

        vision_models = await client.get_capabilities(supports_vision=True)
        print("Vision models: ", [c.model_id for c in vision_models])

        try:
            await client.chat(
                {
                    "model": "openai/gpt-4o",
                    "messages": [{"role": "user", "content": "Hello"}],
                }
            )
        except InsufficientCreditsError as e:
            print(f"Need {e.credits_required} credits, have {e.credits_remaining}")
        except RateLimitError as e:
            print(f"Rate limited, retry after {e.retry_after}s (request {e.request_id})")
        except APIError as e:
            print(f"Gateway error {e.status_code}: {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
