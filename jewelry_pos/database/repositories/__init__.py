# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from jewelry_pos.database.repositories import (
        MetalRatesRepo, ProductsRepo, Product, CustomersRepo, Customer,
        OrdersRepo, OrderHeader, OrderItem,
    )
"""

from .metal_rates_repo import MetalRatesRepo, DomainError as MetalRatesDomainError
from .products_repo import ProductsRepo, Product, DomainError as ProductsDomainError
from .customers_repo import CustomersRepo, Customer, DomainError as CustomersDomainError
from .orders_repo import OrdersRepo, OrderHeader, OrderItem, DomainError as OrdersDomainError

__all__ = [
    "MetalRatesRepo",
    "MetalRatesDomainError",
    "ProductsRepo",
    "Product",
    "ProductsDomainError",
    "CustomersRepo",
    "Customer",
    "CustomersDomainError",
    "OrdersRepo",
    "OrderHeader",
    "OrderItem",
    "OrdersDomainError",
]
