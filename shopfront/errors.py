# shopfront/errors.py
from typing import Any, Dict, List


class ShopError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(ShopError):
    """Malformed input. Carries one entry per failing field."""

    status_code = 400

    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__(errors[0]["msg"] if errors else "Invalid request")
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class Unauthorized(ShopError):
    status_code = 401


class NotFound(ShopError):
    status_code = 404


class InsufficientStock(ShopError):
    status_code = 400
