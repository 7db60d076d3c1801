"""Proximity ranking.

Orders search hits ascending by distance from a reference point. Hits
that already carry a store-computed distance keep it; missing distances
are filled in with the great-circle distance.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from rentgeo.geo.geometry import Coordinate, Distance, haversine_meters


@dataclass(frozen=True)
class PropertyHit:
    """One property row augmented with its location and distance.

    Attributes:
        property: Property columns, opaque to the search core.
        location: Flattened address columns of the owning location.
        point: Resolved coordinate of the location.
        distance_meters: Distance from the search reference, when the
            search has one.
    """

    property: Dict[str, Any]
    location: Dict[str, Any]
    point: Coordinate
    distance_meters: Optional[float] = None

    @property
    def property_id(self) -> int:
        return self.property["id"]

    @property
    def distance(self) -> Optional[Distance]:
        if self.distance_meters is None:
            return None
        return Distance(self.distance_meters)

    def to_record(self) -> Dict[str, Any]:
        """Flatten into the shape returned to API callers."""
        record = {**self.property, **self.location, "lng": self.point.lng, "lat": self.point.lat}
        if self.distance_meters is not None:
            record["distance_meters"] = self.distance_meters
        return record


def rank_by_distance(
    hits: Iterable[PropertyHit],
    reference: Optional[Coordinate] = None,
) -> List[PropertyHit]:
    """Sort hits ascending by distance.

    Python's sort is stable, so equal distances keep their input order.

    Args:
        hits: Candidate hits.
        reference: Point to measure from for hits without a distance.

    Returns:
        New list of hits, each with ``distance_meters`` set.

    Raises:
        ValueError: If a hit has no distance and no reference was given.
    """
    measured = []
    for hit in hits:
        if hit.distance_meters is None:
            if reference is None:
                raise ValueError(
                    f"Property {hit.property_id} has no distance and no reference point was given"
                )
            hit = replace(hit, distance_meters=haversine_meters(reference, hit.point))
        measured.append(hit)
    return sorted(measured, key=lambda h: h.distance_meters)
