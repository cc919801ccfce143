from supply_manager.models.catalog import Product, ProductVariant
from supply_manager.models.party import Customer, StorefrontCustomer
from supply_manager.models.order import (
    CustomerOrder,
    CustomerOrderItem,
    StorefrontOrder,
    StorefrontOrderItem,
    StorefrontOrderLog,
)

__all__ = [
    "Product",
    "ProductVariant",
    "Customer",
    "StorefrontCustomer",
    "StorefrontOrder",
    "StorefrontOrderItem",
    "CustomerOrder",
    "CustomerOrderItem",
    "StorefrontOrderLog",
]
