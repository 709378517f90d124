from .shopclient import ShopClient

__all__ = ["ShopClient"]
