"""Drive the bot through one listing without touching the network.

Scripted gateway frames go in; the REST calls the bot would make are printed.
"""

import asyncio

from trinketbot.app import TrinketBot
from trinketbot.config import MarketplaceConfig, TrinketConfig
from trinketbot.constants import OP_DISPATCH, OP_HELLO
from trinketbot.persistence import InMemoryDocumentStore
from trinketbot.transports import InMemoryConnection, InMemoryGatewayTransport, InMemoryRestClient


def interaction(n, interaction_type, data):
    return {
        "id": f"int{n}",
        "token": f"tok{n}",
        "type": interaction_type,
        "data": data,
        "member": {"user": {"id": "1001", "username": "trinket_fan"}, "roles": [], "permissions": "0"},
    }


def field(component_type, custom_id, **extra):
    return {"type": 18, "component": {"type": component_type, "custom_id": custom_id, **extra}}


async def main():
    rest = InMemoryRestClient()
    rest.respond("GET", "/channels/forum", body={"available_tags": [{"id": "plush", "name": "Plush"}]})
    rest.respond("POST", "/channels/forum/threads", body={"id": "555"})

    conn = InMemoryConnection()
    config = TrinketConfig(token="local", marketplace=MarketplaceConfig(forum_id="forum", tag_ids=["plush"]))
    bot = TrinketBot(config, rest=rest, transport=InMemoryGatewayTransport([conn]), store=InMemoryDocumentStore())

    steps = [
        (3, {"custom_id": "create_marketplace_listing", "component_type": 2}),
        (5, {"custom_id": "mp_s1", "components": [field(4, "count", value="1")]}),
        (5, {"custom_id": "mp_s2", "components": [
            field(3, "payment", values=["PayPal G&S"]),
            field(3, "shipping", values=["included"]),
        ]}),
        (5, {"custom_id": "mp_item_0", "components": [
            field(4, "name", value="Jellycat Bashful Bunny"),
            field(4, "price", value="$40"),
            field(3, "packaging", values=["Tags attached"]),
            field(3, "condition", values=["New"]),
        ]}),
        (5, {"custom_id": "mp_tags", "components": [field(3, "tags", values=["plush"])]}),
        (5, {
            "custom_id": "mp_photos",
            "components": [field(19, "photos", values=["a1"]), field(4, "confirm", value="YES")],
            "resolved": {"attachments": {"a1": {"id": "a1", "url": "https://example.com/bunny.png"}}},
        }),
    ]

    conn.push(OP_HELLO, {"heartbeat_interval": 45000})
    conn.push(OP_DISPATCH, {"session_id": "local", "resume_gateway_url": "wss://localhost"}, s=1, t="READY")
    for n, (interaction_type, data) in enumerate(steps, start=2):
        conn.push(OP_DISPATCH, interaction(n, interaction_type, data), s=n, t="INTERACTION_CREATE")

    def replies():
        return [
            body["data"].get("content", "")
            for _, path, body in rest.calls
            if path.startswith("/interactions/") and body["type"] == 4
        ]

    runner = asyncio.create_task(bot.run())
    while not any("Listing created" in r or r.startswith("❌") for r in replies()):
        await asyncio.sleep(0.05)
    await bot.stop()
    await runner

    for method, path, body in rest.calls:
        content = body.get("data", {}).get("content") if isinstance(body, dict) else None
        print(f"{method:6} {path}" + (f"  -> {content}" if content else ""))


if __name__ == "__main__":
    asyncio.run(main())
