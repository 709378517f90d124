# sdk/shopclient.py
from typing import Any, Dict, Optional

import httpx
import requests


class ShopClient:
    def __init__(self, base_url: str = "http://localhost:5000", timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout

    # Login
    def login(self, username: str, password: str):
        r = self.session.post(f"{self.base_url}/login", json={"username": username, "password": password},
                              timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Products
    def list_products(self):
        r = self.session.get(f"{self.base_url}/product", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def create_product(self, name: str, price: float, stock: int):
        r = self.session.post(f"{self.base_url}/products", json={
            "name": name, "price": price, "stock": stock
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, product_id: str, name: str, price: float, stock: int):
        r = self.session.put(f"{self.base_url}/products/{product_id}", json={
            "name": name, "price": price, "stock": stock
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: str):
        r = self.session.delete(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    # Cart
    def add_to_cart(self, user_id: str, product_id: str, quantity: int = 1):
        r = self.session.post(f"{self.base_url}/cart", json={
            "userId": user_id, "productId": product_id, "quantity": quantity
        }, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def view_cart(self, user_id: str):
        r = self.session.get(f"{self.base_url}/cart/{user_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def purchase(self, user_id: str) -> Dict[str, Any]:
        # don't raise: callers want the {error} body on a short purchase
        r = self.session.post(f"{self.base_url}/cart/purchase", json={"userId": user_id}, timeout=self.timeout)
        body = r.json()
        if r.ok:
            return {"ok": True, "message": body}
        return {"ok": False, "status_code": r.status_code, "error": body.get("error", body)}

    async def purchase_async(self, user_id: str, client: Optional[httpx.AsyncClient] = None) -> httpx.Response:
        if client is not None:
            return await client.post(f"{self.base_url}/cart/purchase", json={"userId": user_id})
        async with httpx.AsyncClient(timeout=self.timeout) as ac:
            return await ac.post(f"{self.base_url}/cart/purchase", json={"userId": user_id})

    # Health
    def health(self):
        r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        return r.json()
