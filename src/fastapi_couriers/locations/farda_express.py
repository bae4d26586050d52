"""Farda Express location directory.

Farda Express accepts free-text city names and publishes no reference-data
endpoint, so the directory is served from a bundled district table. The
bundled table is a small sample with local IDs; pass ``districts`` to serve
a full list.
"""

from __future__ import annotations

from fastapi_couriers.locations.base import LocationDirectory
from fastapi_couriers.types import LocationCity

FARDA_EXPRESS_DISTRICTS: dict[str, tuple[tuple[int, str], ...]] = {
    "Colombo": (
        (1, "Colombo 01"),
        (2, "Colombo 02"),
        (3, "Dehiwala"),
        (4, "Kotte"),
    ),
    "Gampaha": ((101, "Gampaha"), (102, "Negombo")),
    "Kandy": ((201, "Kandy"), (202, "Peradeniya")),
    "Galle": ((301, "Galle"), (302, "Hikkaduwa")),
}


class FardaExpressLocations(LocationDirectory):
    provider_name = "Farda Express"
    default_city = LocationCity(id=1, name="Colombo 01", region="Colombo")
    region_aliases = {
        "colombo": "Colombo",
        "colombo suburbs": "Colombo",
        "western": "Colombo",
        "gampaha": "Gampaha",
        "kandy": "Kandy",
        "central": "Kandy",
        "galle": "Galle",
        "southern": "Galle",
    }

    def __init__(self, districts=None, **kwargs) -> None:
        super().__init__(**kwargs)
        if districts is None:
            districts = FARDA_EXPRESS_DISTRICTS
        self.districts = districts

    async def _fetch_regions(self) -> list[str]:
        return list(self.districts)

    async def _fetch_cities(self, region: str) -> list[LocationCity]:
        return [
            LocationCity(id=city_id, name=name, region=region)
            for city_id, name in self.districts.get(region, ())
        ]

    async def get_all_districts(self) -> list[str]:
        return await self.get_regions()

    async def get_cities_by_district(self, district: str) -> list[LocationCity]:
        return await self.get_cities(district)
