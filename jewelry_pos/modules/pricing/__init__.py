"""
Pricing & payment settlement engine.

Pure, Qt-free functions over Decimal values. The checkout controller calls
settle() on every edit; everything else here is a building block of it.
"""

from .money import round_money, round_rupee, to_decimal
from .rates import MetalRate, MetalRateTable, RateLookup, extract_karat, extract_silver_purity
from .line_item import CartLineItem, ItemPrice, price_cart, price_line_item
from .product_price import (
    ProductPriceInputs,
    ProductPriceResult,
    ProductStone,
    calculate_product_price,
    calculate_stone_prices,
)
from .cart import CartTotals, aggregate
from .discount import DiscountMode, DiscountResult, DiscountSpec, apply_discount
from .exchange import ExchangeGold, credit_value
from .payment_split import (
    AdjustedDue,
    PaymentSplit,
    SplitValidation,
    adjusted_due,
    derive_due,
    is_valid,
    rebalance,
    validate,
)
from .settlement import NegativePayableWarning, SettlementResult, settle

__all__ = [
    "round_money",
    "round_rupee",
    "to_decimal",
    "MetalRate",
    "MetalRateTable",
    "RateLookup",
    "extract_karat",
    "extract_silver_purity",
    "CartLineItem",
    "ItemPrice",
    "price_cart",
    "price_line_item",
    "ProductPriceInputs",
    "ProductPriceResult",
    "ProductStone",
    "calculate_product_price",
    "calculate_stone_prices",
    "CartTotals",
    "aggregate",
    "DiscountMode",
    "DiscountResult",
    "DiscountSpec",
    "apply_discount",
    "ExchangeGold",
    "credit_value",
    "AdjustedDue",
    "PaymentSplit",
    "SplitValidation",
    "adjusted_due",
    "derive_due",
    "is_valid",
    "rebalance",
    "validate",
    "NegativePayableWarning",
    "SettlementResult",
    "settle",
]
