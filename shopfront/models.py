# shopfront/models.py
import math
import re
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from .errors import ValidationError

# Same shapes a browser form would send: numbers or their string forms
_NUMERIC = re.compile(r"^[+-]?([0-9]*[.])?[0-9]+$")
_INTEGER = re.compile(r"^[+-]?[0-9]+$")

M = TypeVar("M", bound=BaseModel)

# BSON stores integers as int64
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _is_blank(v: Any) -> bool:
    return v is None or isinstance(v, (dict, list)) or str(v) == ""


def _in_int64(n: int) -> Optional[int]:
    return n if INT64_MIN <= n <= INT64_MAX else None


def _as_number(v: Any) -> Optional[Union[int, float]]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return _in_int64(v)
    if isinstance(v, float):
        return v if math.isfinite(v) else None
    if isinstance(v, str) and _NUMERIC.match(v):
        return float(v) if "." in v else _in_int64(int(v))
    return None


def _as_int(v: Any) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return _in_int64(v)
    if isinstance(v, float) and math.isfinite(v) and v.is_integer():
        return _in_int64(int(v))
    if isinstance(v, str) and _INTEGER.match(v):
        return _in_int64(int(v))
    return None


# ---------------------------
# Request bodies
# ---------------------------
class ProductIn(BaseModel):
    name: Any = Field(None, validate_default=True)
    price: Any = Field(None, validate_default=True)
    stock: Any = Field(None, validate_default=True)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v):
        if _is_blank(v):
            raise PydanticCustomError("field", "Name is required")
        return str(v)

    @field_validator("price")
    @classmethod
    def _check_price(cls, v):
        n = _as_number(v)
        if n is None:
            raise PydanticCustomError("field", "Price must be a number")
        return n

    @field_validator("stock")
    @classmethod
    def _check_stock(cls, v):
        n = _as_int(v)
        if n is None or n < 0:
            raise PydanticCustomError("field", "Stock must be a non-negative integer")
        return n

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "price": self.price, "stock": self.stock}


class CartAddIn(BaseModel):
    userId: Any = Field(None, validate_default=True)
    productId: Any = Field(None, validate_default=True)
    quantity: Any = Field(None, validate_default=True)

    @field_validator("userId")
    @classmethod
    def _check_user(cls, v):
        if _is_blank(v):
            raise PydanticCustomError("field", "User ID required")
        return str(v)

    @field_validator("productId")
    @classmethod
    def _check_product(cls, v):
        if _is_blank(v):
            raise PydanticCustomError("field", "Product ID required")
        return str(v)

    @field_validator("quantity")
    @classmethod
    def _check_quantity(cls, v):
        n = _as_int(v)
        if n is None or n < 1:
            raise PydanticCustomError("field", "Quantity must be at least 1")
        return n


class PurchaseIn(BaseModel):
    userId: Any = Field(None, validate_default=True)

    @field_validator("userId")
    @classmethod
    def _check_user(cls, v):
        if _is_blank(v):
            raise PydanticCustomError("field", "User ID required")
        return str(v)


class LoginIn(BaseModel):
    # compared verbatim against stored users, no coercion
    username: Any = None
    password: Any = None


# ---------------------------
# Helpers
# ---------------------------
def field_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    out = []
    for err in exc.errors():
        out.append({
            "type": "field",
            "value": err.get("input"),
            "msg": err["msg"],
            "path": ".".join(str(p) for p in err["loc"]),
            "location": "body",
        })
    return out


def parse_body(model: Type[M], payload: Any) -> M:
    """
    Validate a decoded JSON body against `model`. Already-built models pass
    through; anything that isn't an object is treated as an empty one.
    """
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        payload = {}
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors(exc)) from exc
