#!/usr/bin/env python
import asyncio
import os

import httpx
from rich import print

from sdk.shopclient import ShopClient


async def main():
    c = ShopClient(base_url=os.getenv("SHOP_URL", "http://127.0.0.1:5000"))

    # Two units on the shelf, two shoppers wanting both of them
    product = c.create_product("Gaming Laptop", 5000, 2)["product"]
    product_id = product["_id"]
    print(f"\n🖥️  Created product: {product}")

    c.add_to_cart("alice", product_id, 2)
    c.add_to_cart("bob", product_id, 2)

    print("\n⚡ Settling both carts concurrently...")
    async with httpx.AsyncClient(timeout=c.timeout) as client:
        results = await asyncio.gather(
            c.purchase_async("alice", client),
            c.purchase_async("bob", client),
        )

    for who, r in zip(("alice", "bob"), results):
        if r.status_code == 200:
            print(f"✅ {who}: {r.json()}")
        else:
            print(f"❌ {who}: {r.json().get('error')}")

    print("\n📦 Final product state:", c.get_product(product_id))
    print("🛒 Alice cart:", c.view_cart("alice"))
    print("🛒 Bob cart:", c.view_cart("bob"))
    c.delete_product(product_id)


if __name__ == "__main__":
    asyncio.run(main())
