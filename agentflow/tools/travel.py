"""Travel search tools."""

import logging

from pydantic import BaseModel, Field

from agentflow.services.travel import TravelService
from agentflow.tools.base import ToolAnnotations, ToolDefinition, ToolSet


class SearchByCountryInput(BaseModel):
    """Input schema for searching travel packages by country."""

    country: str = Field(
        ...,
        description="Destination country",
        min_length=1,
        max_length=100,
        examples=["Spain", "Japan"],
    )


class AdvancedSearchInput(BaseModel):
    """Input schema for the advanced travel search."""

    days: int = Field(7, description="Number of days (optional)", ge=1, le=365)
    budget: int = Field(1000, description="Budget in USD (optional)", ge=0)
    interests: str = Field("general", description="Travel interests (optional)", max_length=200)


class TravelDetailsInput(BaseModel):
    """Input schema for fetching a travel package."""

    travel_id: str = Field(
        ...,
        alias="travelId",
        description="Travel identifier",
        min_length=1,
        max_length=50,
        examples=["travel_001"],
    )

    class Config:
        populate_by_name = True


class TravelToolSet(ToolSet):
    """Tools for searching the travel catalog."""

    toolset_id = "travel-search-toolset"

    def __init__(self, travel_service: TravelService, logger: logging.Logger | None = None):
        self.travel_service = travel_service
        super().__init__(logger)

    def _build_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="search_travels_by_country",
                description=(
                    "Search available travel packages for a destination country. "
                    "Use when the user asks for trips, travels or holidays in a specific country."
                ),
                input_schema_class=SearchByCountryInput,
                handler=self._search_by_country,
                annotations=ToolAnnotations(
                    title="Search Travels by Country",
                    read_only_hint=True,
                    idempotent_hint=True,
                ),
            ),
            ToolDefinition(
                name="search_travels_advanced",
                description=(
                    "Search travel packages by trip length, budget and interests. "
                    "All parameters are optional; defaults are 7 days, 1000 USD and general interests."
                ),
                input_schema_class=AdvancedSearchInput,
                handler=self._search_advanced,
                annotations=ToolAnnotations(
                    title="Advanced Travel Search",
                    read_only_hint=True,
                    idempotent_hint=True,
                    open_world_hint=True,
                ),
            ),
            ToolDefinition(
                name="get_travel_details",
                description="Get full details (destinations, activities, inclusions) for a travel package id.",
                input_schema_class=TravelDetailsInput,
                handler=self._get_travel_details,
                annotations=ToolAnnotations(
                    title="Get Travel Details",
                    read_only_hint=True,
                    idempotent_hint=True,
                ),
            ),
        ]

    async def _search_by_country(self, params: SearchByCountryInput) -> list[dict]:
        packages = await self.travel_service.search_by_country(params.country)
        return [package.as_dict() for package in packages]

    async def _search_advanced(self, params: AdvancedSearchInput) -> list[dict]:
        packages = await self.travel_service.search_advanced(params.days, params.budget, params.interests)
        return [package.as_dict() for package in packages]

    async def _get_travel_details(self, params: TravelDetailsInput) -> dict:
        details = await self.travel_service.get_details(params.travel_id)
        return details.as_dict()
