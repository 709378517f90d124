# shopfront/services.py
import logging
from typing import Any, Dict, List, Union

from .database import DocumentStore, to_object_id
from .errors import InsufficientStock, NotFound, Unauthorized
from .models import CartAddIn, ProductIn, PurchaseIn, parse_body

logger = logging.getLogger(__name__)

# This file contains the business logic behind every API endpoint.

# Plaintext on purpose: the login contract compares passwords verbatim.
# Don't copy this pattern into any new collection.
DEFAULT_USERS = [
    {"username": "admin", "password": "admin123", "role": "admin"},
    {"username": "user", "password": "user123", "role": "user"},
]


def _public(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    if "_id" in out:
        out["_id"] = str(out["_id"])
    if "productId" in out:
        out["productId"] = str(out["productId"])
    return out


# Seeding
async def seed_users(store: DocumentStore) -> int:
    if await store.count_users():
        return 0
    await store.insert_users(DEFAULT_USERS)
    logger.info("Seeded %d default users", len(DEFAULT_USERS))
    return len(DEFAULT_USERS)


# Catalog
async def list_products(store: DocumentStore) -> List[Dict[str, Any]]:
    return [_public(p) for p in await store.list_products()]


async def get_product(store: DocumentStore, product_id: str) -> Dict[str, Any]:
    oid = to_object_id(product_id)
    p = await store.get_product(oid) if oid else None
    if not p:
        raise NotFound("Product not found")
    return _public(p)


async def create_product(store: DocumentStore, payload: Union[ProductIn, Dict[str, Any]]) -> Dict[str, Any]:
    product = parse_body(ProductIn, payload)
    doc = await store.insert_product(product.to_document())
    logger.info("Created product %s (%s)", doc["_id"], product.name)
    return _public(doc)


async def update_product(store: DocumentStore, product_id: str,
                         payload: Union[ProductIn, Dict[str, Any]]) -> Dict[str, Any]:
    product = parse_body(ProductIn, payload)
    oid = to_object_id(product_id)
    updated = await store.update_product(oid, product.to_document()) if oid else None
    if not updated:
        raise NotFound("Product not found")
    logger.info("Updated product %s", product_id)
    return _public(updated)


async def delete_product(store: DocumentStore, product_id: str) -> None:
    # Deleting something that isn't there is still a success.
    oid = to_object_id(product_id)
    deleted = await store.delete_product(oid) if oid else 0
    logger.info("Delete product %s (matched %d)", product_id, deleted)


# Login
async def login(store: DocumentStore, username: Any, password: Any) -> str:
    # only plain strings ever reach the query; a dict here would be a filter operator
    user = None
    if isinstance(username, str) and isinstance(password, str):
        user = await store.find_user(username, password)
    if not user:
        logger.info("Rejected login for %r", username)
        raise Unauthorized("Invalid credentials")
    return user["role"]


# Cart
async def add_to_cart(store: DocumentStore, payload: Union[CartAddIn, Dict[str, Any]]) -> Dict[str, Any]:
    line = parse_body(CartAddIn, payload)
    oid = to_object_id(line.productId)
    product = await store.get_product(oid) if oid else None
    if not product or product["stock"] < line.quantity:
        raise InsufficientStock("Insufficient stock or product not found")

    doc = await store.insert_cart_line({"userId": line.userId, "productId": oid, "quantity": line.quantity})
    logger.info("Cart %s: +%d x %s", line.userId, line.quantity, oid)
    return _public(doc)


async def view_cart(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    items = []
    total = 0
    for line in await store.find_cart_lines(user_id):
        product = await store.get_product(line["productId"])
        item = _public(line)
        if not product:
            item.update({"product": None, "available": False, "lineTotal": 0})
        else:
            line_total = product["price"] * line["quantity"]
            total += line_total
            item.update({"product": _public(product), "available": True, "lineTotal": line_total})
        items.append(item)
    return {"userId": user_id, "items": items, "total": total}


# Checkout settlement
async def purchase(store: DocumentStore, payload: Union[PurchaseIn, Dict[str, Any]]) -> None:
    """
    Settle every cart line for the user, in the order they were added.

    Each line's stock is checked and decremented in a single conditional
    store call, so stock can't go below zero. The settlement as a whole is
    not atomic: if a later line is short, decrements already made for
    earlier lines stay and the cart is left untouched.
    """
    user_id = parse_body(PurchaseIn, payload).userId
    lines = await store.find_cart_lines(user_id)

    for line in lines:
        updated = await store.decrement_stock(line["productId"], line["quantity"])
        if updated is None:
            product = await store.get_product(line["productId"])
            label = product["name"] if product else str(line["productId"])
            logger.warning("Purchase for %s aborted: %s short of %d", user_id, label, line["quantity"])
            raise InsufficientStock(f"Insufficient stock for {label}")

    cleared = await store.delete_cart_lines(user_id)
    logger.info("Purchase for %s settled %d lines", user_id, cleared)
