"""Courier location directories."""

from fastapi_couriers.locations.base import DEFAULT_REGIONS, LocationDirectory
from fastapi_couriers.locations.farda_express import FardaExpressLocations
from fastapi_couriers.locations.royal_express import RoyalExpressLocations
from fastapi_couriers.locations.trans_express import TransExpressLocations

__all__ = [
    "DEFAULT_REGIONS",
    "FardaExpressLocations",
    "LocationDirectory",
    "RoyalExpressLocations",
    "TransExpressLocations",
]
