"""Travel catalog service interface and implementations."""

import asyncio
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol


@dataclass
class TravelPackage:
    """Travel package data model."""

    id: str
    name: str
    duration: str
    price: str
    interests: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class TravelDetails:
    """Detailed description of a travel package."""

    id: str
    name: str
    description: str
    duration: str
    price: str
    destinations: list[str] = field(default_factory=list)
    activities: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    difficulty: str = "Moderate"
    group_size: str = "8-12 people"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class TravelService(Protocol):
    """Interface for travel search services."""

    async def search_by_country(self, country: str) -> list[TravelPackage]:
        """Search travel packages for a destination country.

        Args:
            country: Destination country name

        Returns:
            Matching travel packages
        """
        ...

    async def search_advanced(self, days: int, budget: int, interests: str) -> list[TravelPackage]:
        """Search travel packages by trip length, budget and interests."""
        ...

    async def get_details(self, travel_id: str) -> TravelDetails:
        """Get full details for a travel package."""
        ...


class MockTravelService:
    """Mock travel service

    Generates travel packages from fixed templates with an optional simulated latency.
    """

    def __init__(self, latency_seconds: float = 0.0):
        """Initialize with a simulated per-call latency."""
        self.latency_seconds = latency_seconds

    async def search_by_country(self, country: str) -> list[TravelPackage]:
        """Return three packages for the country."""
        await self._simulate_latency()
        return [
            TravelPackage(id="travel_001", name=f"Adventure in {country}", duration="7 days", price="$1200"),
            TravelPackage(id="travel_002", name=f"Cultural Tour {country}", duration="5 days", price="$800"),
            TravelPackage(id="travel_003", name=f"Luxury Experience {country}", duration="10 days", price="$2500"),
        ]

    async def search_advanced(self, days: int, budget: int, interests: str) -> list[TravelPackage]:
        """Return a custom package and a slightly longer tailored alternative."""
        await self._simulate_latency()
        return [
            TravelPackage(
                id="travel_004",
                name="Custom Adventure",
                duration=f"{days} days",
                price=f"${budget}",
                interests=interests,
            ),
            TravelPackage(
                id="travel_005",
                name="Tailored Experience",
                duration=f"{days + 2} days",
                price=f"${budget + 300}",
                interests="adventure" if interests == "general" else interests,
            ),
        ]

    async def get_details(self, travel_id: str) -> TravelDetails:
        """Return the details template for any package id."""
        await self._simulate_latency()
        return TravelDetails(
            id=travel_id,
            name="Amazing Travel Experience",
            description="A comprehensive travel package with amazing destinations",
            duration="7 days",
            price="$1500",
            destinations=["City A", "City B", "City C"],
            activities=["Sightseeing", "Adventure sports", "Cultural visits"],
            includes=["Accommodation", "Meals", "Transportation", "Guide"],
        )

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
