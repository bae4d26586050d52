"""Courier adapters."""

from fastapi_couriers.providers.base import (
    BaseShippingProvider,
    BookingContext,
    compute_cod_amount,
    generate_order_no,
)
from fastapi_couriers.providers.farda_express import FardaExpressProvider
from fastapi_couriers.providers.royal_express import RoyalExpressProvider
from fastapi_couriers.providers.trans_express import TransExpressProvider

__all__ = [
    "BaseShippingProvider",
    "BookingContext",
    "FardaExpressProvider",
    "RoyalExpressProvider",
    "TransExpressProvider",
    "compute_cod_amount",
    "generate_order_no",
]
