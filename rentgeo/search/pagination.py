"""Result pages and response metadata."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from rentgeo.geo.geometry import Coordinate
from rentgeo.search.queries import PageRequest
from rentgeo.search.ranking import PropertyHit


@dataclass(frozen=True)
class Page:
    """A window of hits plus the size of the full match set.

    ``total_count`` is evaluated separately from the page fetch, against
    the same query plan.
    """

    items: List[PropertyHit]
    total_count: int
    request: PageRequest

    @classmethod
    def empty(cls, request: PageRequest) -> "Page":
        return cls(items=[], total_count=0, request=request)

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.request.offset + self.count < self.total_count

    def records(self) -> List[Dict[str, Any]]:
        return [hit.to_record() for hit in self.items]


def near_point_meta(center: Coordinate, radius_km: float, page: Page) -> Dict[str, Any]:
    return {
        "center": center.to_dict(),
        "radius_km": radius_km,
        "total_count": page.total_count,
        "count": page.count,
        "limit": page.request.limit,
        "offset": page.request.offset,
    }


def list_meta(count: int, **params: Optional[Any]) -> Dict[str, Any]:
    """Metadata for modes that only report the size of the returned set."""
    return {**params, "count": count}
