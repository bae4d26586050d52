"""Trans Express district/city directory."""

from __future__ import annotations

from typing import Any

from fastapi_couriers.exceptions import ResponseParseError
from fastapi_couriers.locations.base import LocationDirectory, Requester
from fastapi_couriers.types import LocationCity

DISTRICTS_ENDPOINT = "/districts"
CITIES_ENDPOINT = "/cities"
PROVINCES_ENDPOINT = "/provinces"

DEFAULT_CITY_ID = 864


def _rows(payload: Any) -> list[dict]:
    """Accept a bare list or a ``{"data": [...]}`` envelope."""
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise ResponseParseError(
            f"Expected a list from Trans Express, got {type(payload).__name__}"
        )
    return [row for row in payload if isinstance(row, dict)]


def _name(row: dict) -> str:
    return str(row.get("text") or row.get("name") or "").strip()


class TransExpressLocations(LocationDirectory):
    provider_name = "Trans Express"
    default_city = LocationCity(
        id=DEFAULT_CITY_ID, name="Colombo 01", region="Colombo"
    )
    fallback_cities = (
        LocationCity(id=864, name="Colombo 01", region="Colombo"),
        LocationCity(id=879, name="Dehiwala", region="Colombo"),
        LocationCity(id=901, name="Kandy", region="Kandy"),
        LocationCity(id=920, name="Galle", region="Galle"),
        LocationCity(id=950, name="Negombo", region="Gampaha"),
    )
    region_aliases = {
        "colombo suburbs": "Colombo",
        "western": "Colombo",
    }

    def __init__(self, request: Requester, **kwargs) -> None:
        super().__init__(**kwargs)
        self._request = request
        self._district_ids: dict[str, int] = {}

    async def _fetch_regions(self) -> list[str]:
        rows = _rows(await self._request("GET", DISTRICTS_ENDPOINT))
        self._district_ids = {
            _name(row): int(row["id"]) for row in rows if _name(row)
        }
        return list(self._district_ids)

    async def district_id(self, district: str) -> int | None:
        canonical = self.normalize_region_name(district)
        if not self._district_ids:
            await self.get_valid_region_names()
        return self._district_ids.get(canonical)

    async def _fetch_cities(self, region: str) -> list[LocationCity]:
        district_id = await self.district_id(region)
        if district_id is None:
            return []
        return await self.get_cities_by_district_id(district_id, region)

    async def _fetch_all_cities(self) -> list[LocationCity] | None:
        rows = _rows(await self._request("GET", CITIES_ENDPOINT))
        if not self._district_ids:
            await self.get_valid_region_names()
        names = {
            district_id: name
            for name, district_id in self._district_ids.items()
        }
        return [
            LocationCity(
                id=int(row["id"]),
                name=_name(row),
                region=names.get(row.get("district_id"), ""),
            )
            for row in rows
        ]

    async def get_cities_by_district_id(
        self, district_id: int, region: str = ""
    ) -> list[LocationCity]:
        rows = _rows(
            await self._request(
                "GET", CITIES_ENDPOINT, params={"district_id": district_id}
            )
        )
        self.logger.debug(
            "Got %d Trans Express cities for district %s",
            len(rows),
            district_id,
        )
        return [
            LocationCity(id=int(row["id"]), name=_name(row), region=region)
            for row in rows
        ]

    async def get_districts_by_province_id(self, province_id: int) -> list:
        return _rows(
            await self._request(
                "GET", DISTRICTS_ENDPOINT, params={"province_id": province_id}
            )
        )

    async def get_provinces(self) -> list:
        return _rows(await self._request("GET", PROVINCES_ENDPOINT))

    async def get_all_districts(self) -> list[str]:
        return await self.get_regions()

    async def get_cities_by_district(self, district: str) -> list[LocationCity]:
        return await self.get_cities(district)
