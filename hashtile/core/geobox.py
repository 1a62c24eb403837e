"""
GeoBox

Validated, immutable axis-aligned bounding box in latitude/longitude space.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Optional, Tuple

from hashtile.core.exceptions import InvalidBoundsError


@dataclass(frozen=True)
class GeoBox:
    """
    Axis-aligned geographic bounding box in WGS84 decimal degrees

    Boxes are values: every operation that shrinks or combines boxes returns
    a new GeoBox.

    Attributes:
        min_lat: Southern edge (-90 to 90)
        max_lat: Northern edge (-90 to 90)
        min_lon: Western edge (-180 to 180)
        max_lon: Eastern edge (-180 to 180)

    Examples:
        >>> box = GeoBox(37.0, 38.0, 127.0, 128.0)
        >>> box.area()
        1.0
        >>> box.intersect(GeoBox(37.5, 39.0, 127.5, 129.0))
        GeoBox(min_lat=37.5, max_lat=38.0, min_lon=127.5, max_lon=128.0)
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self):
        values = (self.min_lat, self.max_lat, self.min_lon, self.max_lon)
        if not all(
            isinstance(v, numbers.Real) and not isinstance(v, bool) and math.isfinite(v)
            for v in values
        ):
            raise InvalidBoundsError(f"Bounds must be finite numbers, got {values}")

        if self.min_lat >= self.max_lat:
            raise InvalidBoundsError(
                f"min_lat ({self.min_lat}) must be less than max_lat ({self.max_lat})"
            )
        if self.min_lon >= self.max_lon:
            raise InvalidBoundsError(
                f"min_lon ({self.min_lon}) must be less than max_lon ({self.max_lon})"
            )
        if self.min_lat < -90.0 or self.max_lat > 90.0:
            raise InvalidBoundsError(
                f"Latitude range [{self.min_lat}, {self.max_lat}] exceeds [-90, 90]"
            )
        if self.min_lon < -180.0 or self.max_lon > 180.0:
            raise InvalidBoundsError(
                f"Longitude range [{self.min_lon}, {self.max_lon}] exceeds [-180, 180]"
            )

    @classmethod
    def from_bounds(cls, minx: float, miny: float, maxx: float, maxy: float) -> "GeoBox":
        """
        Build a GeoBox from (minx, miny, maxx, maxy) ordering

        This is the ordering rasterio uses for dataset bounds.
        """
        return cls(min_lat=miny, max_lat=maxy, min_lon=minx, max_lon=maxx)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Bounding box as (minx, miny, maxx, maxy)"""
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    @property
    def lat_span(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_span(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def center(self) -> Tuple[float, float]:
        """Centre point as (lat, lon)"""
        return ((self.min_lat + self.max_lat) / 2.0, (self.min_lon + self.max_lon) / 2.0)

    def area(self) -> float:
        """
        Planar area in square degrees

        This ignores the shrinking of longitude degrees towards the poles. It
        is only meaningful as a ratio between boxes at the same latitude.
        """
        return self.lat_span * self.lon_span

    def intersect(self, other: "GeoBox") -> Optional["GeoBox"]:
        """
        Overlapping region of two boxes

        Args:
            other: Box to intersect with

        Returns:
            The overlap as a new GeoBox, or None when the boxes are disjoint.
            Boxes that only share an edge or a corner do not intersect.
        """
        min_lat = max(self.min_lat, other.min_lat)
        max_lat = min(self.max_lat, other.max_lat)
        min_lon = max(self.min_lon, other.min_lon)
        max_lon = min(self.max_lon, other.max_lon)

        if min_lat >= max_lat or min_lon >= max_lon:
            return None

        return GeoBox(min_lat, max_lat, min_lon, max_lon)

    def contains(self, other: "GeoBox") -> bool:
        """True when other lies entirely inside this box (edges included)"""
        return (
            self.min_lat <= other.min_lat
            and self.max_lat >= other.max_lat
            and self.min_lon <= other.min_lon
            and self.max_lon >= other.max_lon
        )
