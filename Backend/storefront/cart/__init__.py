"""
Session shopping cart, partitioned by store.
"""
from .storage import CartStorage, JsonFileCartStorage, MemoryCartStorage
from .store import CartLineItem, CartStore, CheckoutSummary, TenantCart

__all__ = [
    "CartStorage",
    "JsonFileCartStorage",
    "MemoryCartStorage",
    "CartLineItem",
    "CartStore",
    "CheckoutSummary",
    "TenantCart",
]
