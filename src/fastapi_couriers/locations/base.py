"""Common behaviour of courier location directories."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, ClassVar

from fastapi_couriers.exceptions import ShippingError
from fastapi_couriers.types import LocationCity

DEFAULT_REGIONS = ("Colombo", "Gampaha", "Kandy")

#: Signature of an adapter's authenticated request method.
Requester = Callable[..., Awaitable[Any]]

_LOOKUP_ERRORS = (ShippingError, KeyError, TypeError, ValueError)


class LocationDirectory(ABC):
    """Region → city lookups for one courier.

    Results are cached on the instance. Failed or empty lookups degrade to
    fallback data and are not cached, so the next call tries again.
    """

    provider_name: ClassVar[str]
    default_city: ClassVar[LocationCity]
    fallback_cities: ClassVar[tuple[LocationCity, ...]] = ()
    #: Keys are casefolded aliases, values the courier's canonical name.
    region_aliases: ClassVar[Mapping[str, str]] = {}

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._regions: list[str] | None = None
        self._cities: dict[str, list[LocationCity]] = {}
        self._all_cities: list[LocationCity] | None = None

    @abstractmethod
    async def _fetch_regions(self) -> list[str]:
        """Return region names from the courier."""

    @abstractmethod
    async def _fetch_cities(self, region: str) -> list[LocationCity]:
        """Return the cities of one (canonical) region."""

    async def _fetch_all_cities(self) -> list[LocationCity] | None:
        """Return every city in one call, or None to walk the regions."""
        return None

    def normalize_region_name(self, name: str | None) -> str:
        stripped = (name or "").strip()
        return self.region_aliases.get(stripped.casefold(), stripped)

    async def get_valid_region_names(self) -> list[str] | None:
        """Upstream region names, or None when they could not be fetched."""
        if self._regions is None:
            try:
                regions = await self._fetch_regions()
            except _LOOKUP_ERRORS as exc:
                self.logger.warning(
                    "Could not fetch %s regions: %s", self.provider_name, exc
                )
                return None
            if not regions:
                return None
            self._regions = regions
        return list(self._regions)

    async def get_regions(self) -> list[str]:
        regions = await self.get_valid_region_names()
        if not regions:
            self.logger.warning(
                "Using fallback region list for %s", self.provider_name
            )
            return list(DEFAULT_REGIONS)
        return regions

    async def get_cities(self, region: str) -> list[LocationCity]:
        canonical = self.normalize_region_name(region)
        if canonical in self._cities:
            return list(self._cities[canonical])

        try:
            cities = await self._fetch_cities(canonical)
        except _LOOKUP_ERRORS as exc:
            self.logger.warning(
                "Could not fetch %s cities for %s: %s",
                self.provider_name,
                canonical,
                exc,
            )
            cities = []

        if not cities:
            return [self.default_city]
        self._cities[canonical] = cities
        return list(cities)

    async def get_all_cities(self) -> list[LocationCity]:
        if self._all_cities is not None:
            return list(self._all_cities)

        try:
            cities = await self._fetch_all_cities()
        except _LOOKUP_ERRORS as exc:
            self.logger.warning(
                "Could not fetch %s city list: %s", self.provider_name, exc
            )
            cities = []

        if cities is None:
            seen: dict[int, LocationCity] = {}
            for region in await self.get_regions():
                for city in await self.get_cities(region):
                    seen.setdefault(city.id, city)
            cities = list(seen.values())

        if not cities or cities == [self.default_city]:
            return list(self.fallback_cities or (self.default_city,))
        self._all_cities = cities
        return list(cities)

    async def find_city(self, name: str | None) -> LocationCity | None:
        wanted = (name or "").strip().casefold()
        if not wanted:
            return None
        for city in await self.get_all_cities():
            if city.name.casefold() == wanted:
                return city
        return None
