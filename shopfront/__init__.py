# shopfront: minimal storefront backend (catalog, login, cart, checkout)
__version__ = "0.1.0"
