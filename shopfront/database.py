# shopfront/database.py
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import AsyncMongoClient, ReturnDocument

from .config import Settings

logger = logging.getLogger(__name__)

# Collection names as the storefront front-end has always used them
PRODUCTS = "products"
USERS = "users"
CARTS = "carts"


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a client-supplied id; None when it can't name any document."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class DocumentStore(ABC):
    """
    Everything the services need from the database. Each method is one
    independent round trip; nothing spans calls.
    """

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> None: ...

    # products
    @abstractmethod
    async def list_products(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def get_product(self, product_id: ObjectId) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def insert_product(self, doc: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    async def update_product(self, product_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def delete_product(self, product_id: ObjectId) -> int: ...

    @abstractmethod
    async def decrement_stock(self, product_id: ObjectId, quantity: int) -> Optional[Dict[str, Any]]:
        """
        Take `quantity` off the product's stock only if at least that much is
        left. Returns the updated product, or None when the product is gone
        or short.
        """

    # users
    @abstractmethod
    async def find_user(self, username: str, password: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    async def count_users(self) -> int: ...

    @abstractmethod
    async def insert_users(self, docs: Iterable[Dict[str, Any]]) -> None: ...

    # cart lines
    @abstractmethod
    async def insert_cart_line(self, doc: Dict[str, Any]) -> Dict[str, Any]: ...

    @abstractmethod
    async def find_cart_lines(self, user_id: str) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def delete_cart_lines(self, user_id: str) -> int: ...


# ---------------------------
# MongoDB
# ---------------------------
class MongoStore(DocumentStore):
    def __init__(self, uri: str, default_database: str = "shop", server_selection_timeout_ms: int = 5000):
        self.uri = uri
        self.default_database = default_database
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.client: Optional[AsyncMongoClient] = None
        self.db = None

    async def open(self) -> None:
        self.client = AsyncMongoClient(self.uri, serverSelectionTimeoutMS=self.server_selection_timeout_ms)
        self.db = self.client.get_default_database(self.default_database)
        logger.info("Using MongoDB database %r", self.db.name)

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    async def ping(self) -> None:
        await self.client.admin.command("ping")

    async def list_products(self) -> List[Dict[str, Any]]:
        return await self.db[PRODUCTS].find().to_list(None)

    async def get_product(self, product_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.db[PRODUCTS].find_one({"_id": product_id})

    async def insert_product(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(doc)
        result = await self.db[PRODUCTS].insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def update_product(self, product_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.db[PRODUCTS].find_one_and_update(
            {"_id": product_id}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )

    async def delete_product(self, product_id: ObjectId) -> int:
        result = await self.db[PRODUCTS].delete_one({"_id": product_id})
        return result.deleted_count

    async def decrement_stock(self, product_id: ObjectId, quantity: int) -> Optional[Dict[str, Any]]:
        return await self.db[PRODUCTS].find_one_and_update(
            {"_id": product_id, "stock": {"$gte": quantity}},
            {"$inc": {"stock": -quantity}},
            return_document=ReturnDocument.AFTER,
        )

    async def find_user(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        return await self.db[USERS].find_one({"username": username, "password": password})

    async def count_users(self) -> int:
        return await self.db[USERS].count_documents({})

    async def insert_users(self, docs: Iterable[Dict[str, Any]]) -> None:
        await self.db[USERS].insert_many([dict(d) for d in docs])

    async def insert_cart_line(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(doc)
        result = await self.db[CARTS].insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def find_cart_lines(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.db[CARTS].find({"userId": user_id}).to_list(None)

    async def delete_cart_lines(self, user_id: str) -> int:
        result = await self.db[CARTS].delete_many({"userId": user_id})
        return result.deleted_count


# ---------------------------
# In-memory (tests, demos, offline dev)
# ---------------------------
class MemoryStore(DocumentStore):
    """
    Dict-backed store. Every call yields to the event loop once, so
    concurrent requests interleave at the same points they would against a
    real database.
    """

    def __init__(self):
        self.products: Dict[ObjectId, Dict[str, Any]] = {}
        self.users: Dict[ObjectId, Dict[str, Any]] = {}
        self.carts: Dict[ObjectId, Dict[str, Any]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def _round_trip(self) -> None:
        await asyncio.sleep(0)

    async def ping(self) -> None:
        await self._round_trip()

    async def list_products(self) -> List[Dict[str, Any]]:
        await self._round_trip()
        return [dict(p) for p in self.products.values()]

    async def get_product(self, product_id: ObjectId) -> Optional[Dict[str, Any]]:
        await self._round_trip()
        p = self.products.get(product_id)
        return dict(p) if p else None

    async def insert_product(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        await self._round_trip()
        doc = {"_id": ObjectId(), **doc}
        self.products[doc["_id"]] = doc
        return dict(doc)

    async def update_product(self, product_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self._round_trip()
        p = self.products.get(product_id)
        if p is None:
            return None
        p.update(fields)
        return dict(p)

    async def delete_product(self, product_id: ObjectId) -> int:
        await self._round_trip()
        self._locks.pop(f"product:{product_id}", None)
        return 1 if self.products.pop(product_id, None) is not None else 0

    async def decrement_stock(self, product_id: ObjectId, quantity: int) -> Optional[Dict[str, Any]]:
        async with self._get_lock(f"product:{product_id}"):
            await self._round_trip()
            p = self.products.get(product_id)
            if p is None or p["stock"] < quantity:
                return None
            p["stock"] -= quantity
            return dict(p)

    async def find_user(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        await self._round_trip()
        for u in self.users.values():
            if u.get("username") == username and u.get("password") == password:
                return dict(u)
        return None

    async def count_users(self) -> int:
        await self._round_trip()
        return len(self.users)

    async def insert_users(self, docs: Iterable[Dict[str, Any]]) -> None:
        await self._round_trip()
        for d in docs:
            d = {"_id": ObjectId(), **d}
            self.users[d["_id"]] = d

    async def insert_cart_line(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        await self._round_trip()
        doc = {"_id": ObjectId(), **doc}
        self.carts[doc["_id"]] = doc
        return dict(doc)

    async def find_cart_lines(self, user_id: str) -> List[Dict[str, Any]]:
        await self._round_trip()
        return [dict(c) for c in self.carts.values() if c["userId"] == user_id]

    async def delete_cart_lines(self, user_id: str) -> int:
        await self._round_trip()
        doomed = [cid for cid, c in self.carts.items() if c["userId"] == user_id]
        for cid in doomed:
            del self.carts[cid]
        return len(doomed)


def open_store(settings: Settings) -> DocumentStore:
    """Build (not connect) the store the settings ask for."""
    if settings.store_backend == "memory":
        return MemoryStore()
    if settings.store_backend == "mongo":
        return MongoStore(
            settings.mongo_uri,
            default_database=settings.default_database,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
        )
    raise ValueError(f"unknown store backend: {settings.store_backend!r}")
