"""Spatial store contract.

The search service talks to persistence only through this interface,
so a PostGIS database and an in-process engine are interchangeable.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from rentgeo.geo.geometry import Coordinate
from rentgeo.search.builder import QueryPlan
from rentgeo.search.ranking import PropertyHit


class SpatialStore(ABC):
    """Async spatial query engine over properties and their locations.

    Every read evaluates one plan in one round-trip; callers that need a
    count and a page issue two calls with the same plan.
    """

    @abstractmethod
    async def has_properties(self) -> bool:
        """Return True if at least one property exists."""

    @abstractmethod
    async def count(self, plan: QueryPlan) -> int:
        """Count matches for ``plan`` without any window applied."""

    @abstractmethod
    async def fetch(
        self,
        plan: QueryPlan,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[PropertyHit]:
        """Fetch matches for ``plan`` in plan order.

        Args:
            plan: Query plan to evaluate.
            limit: Maximum number of hits, or None for all of them.
            offset: Number of leading hits to skip.
        """

    @abstractmethod
    async def property_point(self, property_id: int) -> Optional[Coordinate]:
        """Coordinate of a property's location, or None if it does not exist."""

    @abstractmethod
    async def property_location_id(self, property_id: int) -> Optional[int]:
        """Location id owned by a property, or None if it does not exist."""

    @abstractmethod
    async def update_location_point(self, location_id: int, point: Coordinate) -> bool:
        """Move a location. Returns False if the location does not exist."""

    @abstractmethod
    async def insert_location(
        self,
        *,
        address: str,
        city: str,
        state: Optional[str],
        country: str,
        postal_code: Optional[str],
        point: Coordinate,
    ) -> int:
        """Persist a new location and return its id."""

    @abstractmethod
    async def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        """Great-circle distance in meters using the store's native function."""
