"""Royal Express (Curfox) state/city directory."""

from __future__ import annotations

from typing import Any

from fastapi_couriers.exceptions import ResponseParseError
from fastapi_couriers.locations.base import LocationDirectory, Requester
from fastapi_couriers.types import LocationCity

STATES_ENDPOINT = "/merchant/state"
CITIES_ENDPOINT = "/merchant/city"

ROYAL_EXPRESS_STATE_ALIASES = {
    "colombo suburbs": "Colombo",
    "colombo": "Colombo",
    "western": "Colombo",
    "galle": "Galle",
}


def _data(payload: Any) -> list[dict]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise ResponseParseError(
            f"Unexpected Royal Express location response: {payload!r}"
        )
    return [row for row in data if isinstance(row, dict)]


def _region_of(row: dict, fallback: str) -> str:
    state = row.get("state")
    if isinstance(state, dict):
        return str(state.get("name") or fallback)
    return str(state or fallback)


class RoyalExpressLocations(LocationDirectory):
    provider_name = "Royal Express"
    default_city = LocationCity(id=1001, name="Colombo 01", region="Colombo")
    fallback_cities = (
        LocationCity(id=1001, name="Colombo 01", region="Colombo"),
        LocationCity(id=1002, name="Colombo 02", region="Colombo"),
        LocationCity(id=1016, name="Dehiwala", region="Colombo"),
        LocationCity(id=2001, name="Kandy", region="Kandy"),
        LocationCity(id=3001, name="Galle", region="Galle"),
        LocationCity(id=4001, name="Gampaha", region="Gampaha"),
    )
    region_aliases = ROYAL_EXPRESS_STATE_ALIASES

    def __init__(self, request: Requester, **kwargs) -> None:
        super().__init__(**kwargs)
        self._request = request
        self._state_ids: dict[str, int] = {}

    async def fetch_states(
        self, *, name: str | None = None, country_id: int | None = None
    ) -> list[dict]:
        params: dict[str, Any] = {"noPagination": ""}
        if name:
            params["filter[name]"] = name
        if country_id:
            params["filter[country_id]"] = country_id
        return _data(
            await self._request("GET", STATES_ENDPOINT, params=params)
        )

    async def _fetch_regions(self) -> list[str]:
        rows = await self.fetch_states()
        self._state_ids = {
            str(row["name"]): int(row["id"]) for row in rows if row.get("name")
        }
        return sorted(self._state_ids)

    async def _fetch_cities(self, region: str) -> list[LocationCity]:
        if not self._state_ids:
            await self.get_valid_region_names()
        state_id = self._state_ids.get(region)
        if state_id is None:
            return []
        rows = _data(
            await self._request(
                "GET",
                CITIES_ENDPOINT,
                params={"noPagination": "", "filter[state_id]": state_id},
            )
        )
        return [
            LocationCity(
                id=int(row["id"]),
                name=str(row["name"]),
                region=_region_of(row, region),
            )
            for row in rows
        ]

    async def _fetch_all_cities(self) -> list[LocationCity] | None:
        rows = _data(
            await self._request(
                "GET", CITIES_ENDPOINT, params={"noPagination": ""}
            )
        )
        return [
            LocationCity(
                id=int(row["id"]),
                name=str(row["name"]),
                region=_region_of(row, ""),
            )
            for row in rows
        ]

    async def get_all_states(self) -> list[str]:
        return await self.get_regions()

    async def get_cities_by_state(self, state: str) -> list[LocationCity]:
        return await self.get_cities(state)
