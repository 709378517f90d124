#!/usr/bin/env python
import os

from rich import print

from sdk.shopclient import ShopClient


def main():
    c = ShopClient(base_url=os.getenv("SHOP_URL", "http://127.0.0.1:5000"))

    # -----------------------------
    # Login
    # -----------------------------
    print("Logging in as admin...")
    print(c.login("admin", "admin123"))

    # -----------------------------
    # Create products
    # -----------------------------
    print("\nCreating products...")
    laptop = c.create_product("Laptop", 1500, 3)["product"]
    mouse = c.create_product("Mouse", 25.5, 10)["product"]
    print(laptop)
    print(mouse)

    # -----------------------------
    # List products
    # -----------------------------
    print("\nListing products...")
    print(c.list_products())

    # -----------------------------
    # Fill a cart
    # -----------------------------
    user_id = "alice"
    print(f"\nAdding products to {user_id}'s cart...")
    print(c.add_to_cart(user_id, laptop["_id"], 1))
    print(c.add_to_cart(user_id, mouse["_id"], 2))
    print(c.view_cart(user_id))

    # -----------------------------
    # Purchase
    # -----------------------------
    print("\nPurchasing...")
    print(c.purchase(user_id))
    print(c.get_product(laptop["_id"]))
    print(c.get_product(mouse["_id"]))

    # -----------------------------
    # Cleanup
    # -----------------------------
    print("\nDeleting demo products...")
    print(c.delete_product(laptop["_id"]))
    print(c.delete_product(mouse["_id"]))


if __name__ == "__main__":
    main()
