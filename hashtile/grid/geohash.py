"""
Geohash Grid Implementation

Enumerates geohash cells over a bounding box without searching the string
space: cell indices are computed directly from the cell size at a precision
and each cell's code is re-derived by encoding its centre.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterator, Tuple

from hashtile.core.exceptions import InvalidGeohashError, InvalidPrecisionError
from hashtile.core.geobox import GeoBox

logger = logging.getLogger(__name__)

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {c: i for i, c in enumerate(BASE32)}

MIN_PRECISION = 1
MAX_PRECISION = 12

# Full extent of the geohash grid (min_lat, max_lat, min_lon, max_lon)
WORLD = (-90.0, 90.0, -180.0, 180.0)

# Allowed drift between a cell box and the box decoded from its id, in degrees
CELL_TOLERANCE = 1e-9


def validate_precision(precision: int) -> int:
    """
    Check that a precision is a usable geohash length

    Raises:
        InvalidPrecisionError: If precision is not an integer in 1..12
    """
    if isinstance(precision, bool) or not isinstance(precision, numbers.Integral):
        raise InvalidPrecisionError(f"Precision must be an integer, got {precision!r}")
    if not MIN_PRECISION <= precision <= MAX_PRECISION:
        raise InvalidPrecisionError(
            f"Precision must be between {MIN_PRECISION} and {MAX_PRECISION}, got {precision}"
        )
    return int(precision)


def bit_counts(precision: int) -> Tuple[int, int]:
    """
    Number of (latitude, longitude) bits in a geohash of this length

    Each character carries 5 bits, interleaved starting with longitude, so
    longitude receives the extra bit when the total is odd.
    """
    total = 5 * precision
    return total // 2, (total + 1) // 2


def cell_dimensions(precision: int) -> Tuple[float, float]:
    """
    Size of a geohash cell in degrees

    Args:
        precision: Geohash length (1-12)

    Returns:
        Tuple of (latitude degrees, longitude degrees)

    Examples:
        >>> cell_dimensions(1)
        (45.0, 45.0)
        >>> cell_dimensions(2)
        (5.625, 11.25)
    """
    precision = validate_precision(precision)
    lat_bits, lon_bits = bit_counts(precision)
    return (180.0 / 2**lat_bits, 360.0 / 2**lon_bits)


def encode(lat: float, lon: float, precision: int) -> str:
    """
    Encode a point as a geohash

    Args:
        lat: Latitude in decimal degrees (-90 to 90)
        lon: Longitude in decimal degrees (-180 to 180)
        precision: Geohash length (1-12)

    Returns:
        Geohash string

    Examples:
        >>> encode(57.64911, 10.40744, 11)
        'u4pruydqqvj'
    """
    precision = validate_precision(precision)
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise InvalidGeohashError(f"Coordinate ({lat}, {lon}) is outside the geohash range")

    lat_min, lat_max, lon_min, lon_max = WORLD
    even = True
    bit = 0
    ch = 0
    out = []

    while len(out) < precision:
        if even:
            mid = (lon_min + lon_max) / 2.0
            if lon >= mid:
                ch = (ch << 1) | 1
                lon_min = mid
            else:
                ch <<= 1
                lon_max = mid
        else:
            mid = (lat_min + lat_max) / 2.0
            if lat >= mid:
                ch = (ch << 1) | 1
                lat_min = mid
            else:
                ch <<= 1
                lat_max = mid

        even = not even
        bit += 1
        if bit == 5:
            out.append(BASE32[ch])
            bit = 0
            ch = 0

    return "".join(out)


def decode_box(geohash: str) -> GeoBox:
    """
    Decode a geohash into the box it names

    Args:
        geohash: Geohash string (case-insensitive)

    Returns:
        GeoBox of the cell

    Raises:
        InvalidGeohashError: If the string is empty, too long, or contains
            characters outside the geohash alphabet
    """
    if not geohash:
        raise InvalidGeohashError("Geohash must be non-empty")
    if len(geohash) > MAX_PRECISION:
        raise InvalidGeohashError(
            f"Geohash '{geohash}' is longer than {MAX_PRECISION} characters"
        )

    lat_min, lat_max, lon_min, lon_max = WORLD
    even = True

    for c in geohash.lower():
        try:
            value = _DECODE_MAP[c]
        except KeyError as e:
            raise InvalidGeohashError(f"Invalid geohash character {c!r} in '{geohash}'") from e

        for mask in (16, 8, 4, 2, 1):
            if even:
                mid = (lon_min + lon_max) / 2.0
                if value & mask:
                    lon_min = mid
                else:
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2.0
                if value & mask:
                    lat_min = mid
                else:
                    lat_max = mid
            even = not even

    return GeoBox(lat_min, lat_max, lon_min, lon_max)


def decode_center(geohash: str) -> Tuple[float, float]:
    """Centre of a geohash cell as (lat, lon)"""
    return decode_box(geohash).center


@dataclass(frozen=True)
class GeohashCell:
    """
    One geohash grid cell

    Attributes:
        id: Geohash code
        precision: Code length
        geo_box: Geographic bounds of the cell
    """

    id: str
    precision: int
    geo_box: GeoBox

    def __post_init__(self):
        if len(self.id) != self.precision:
            raise InvalidGeohashError(
                f"Geohash '{self.id}' does not have precision {self.precision}"
            )

        expected = decode_box(self.id)
        if any(
            abs(a - b) > CELL_TOLERANCE for a, b in zip(self.geo_box.bounds, expected.bounds)
        ):
            raise InvalidGeohashError(
                f"Box {self.geo_box} does not match geohash '{self.id}' ({expected})"
            )

    @classmethod
    def from_id(cls, geohash: str) -> "GeohashCell":
        """Build a cell by decoding its code"""
        geohash = geohash.lower()
        return cls(id=geohash, precision=len(geohash), geo_box=decode_box(geohash))

    def area(self) -> float:
        return self.geo_box.area()


class GeohashGrid:
    """
    Geohash grid over the WGS84 globe

    At precision p a geohash carries 5p interleaved bits; latitude gets
    floor(5p/2) of them and longitude ceil(5p/2), so the globe is a regular
    2**lat_bits by 2**lon_bits grid. Cells intersecting a box are found by
    computing the row/column index range the box spans.

    Cells are yielded in row-major order: west to east within a row, rows
    from south to north.

    Examples:
        >>> grid = GeohashGrid()
        >>> box = GeoBox(0.0, 1.0, 0.0, 1.0)
        >>> [cell.id for cell in grid.cells_for(box, 1)]
        ['s']
        >>> grid.cell_for_point(57.64911, 10.40744, 5).id
        'u4pru'
    """

    def cells_for(self, box: GeoBox, precision: int) -> Iterator[GeohashCell]:
        """
        Enumerate every geohash cell at a precision that intersects a box

        Cells that only touch the box along an edge are not included.
        The precision is checked before the iterator is returned.

        Args:
            box: Region of interest
            precision: Geohash length (1-12)

        Returns:
            Lazy iterator of GeohashCell; calling again with the same
            arguments yields the same cells in the same order

        Raises:
            InvalidPrecisionError: If precision is not in 1..12
        """
        precision = validate_precision(precision)
        return self._iter_cells(box, precision)

    def cell_count(self, box: GeoBox, precision: int) -> int:
        """Number of cells cells_for would yield"""
        return sum(1 for _ in self.cells_for(box, precision))

    def cell_for_point(self, lat: float, lon: float, precision: int) -> GeohashCell:
        return GeohashCell.from_id(encode(lat, lon, precision))

    def cell_box(self, cell_id: str) -> GeoBox:
        return decode_box(cell_id)

    # -------------------------------------------------------------------------
    # Internal helper methods
    # -------------------------------------------------------------------------

    def _iter_cells(self, box: GeoBox, precision: int) -> Iterator[GeohashCell]:
        lat_bits, lon_bits = bit_counts(precision)
        lat_dim, lon_dim = cell_dimensions(precision)
        world_min_lat, _, world_min_lon, _ = WORLD

        row_start, row_stop = self._index_range(
            box.min_lat - world_min_lat, box.max_lat - world_min_lat, lat_dim, 2**lat_bits
        )
        col_start, col_stop = self._index_range(
            box.min_lon - world_min_lon, box.max_lon - world_min_lon, lon_dim, 2**lon_bits
        )

        logger.debug(
            "Enumerating %d x %d candidate cells at precision %d",
            row_stop - row_start, col_stop - col_start, precision,
        )

        for row in range(row_start, row_stop):
            min_lat = world_min_lat + row * lat_dim
            max_lat = world_min_lat + (row + 1) * lat_dim
            for col in range(col_start, col_stop):
                min_lon = world_min_lon + col * lon_dim
                max_lon = world_min_lon + (col + 1) * lon_dim
                cell_box = GeoBox(min_lat, max_lat, min_lon, max_lon)

                # Rounding at the range edges can admit a neighbour that only touches the box
                if box.intersect(cell_box) is None:
                    continue

                lat, lon = cell_box.center
                yield GeohashCell(id=encode(lat, lon, precision), precision=precision, geo_box=cell_box)

    @staticmethod
    def _index_range(low: float, high: float, step: float, count: int) -> Tuple[int, int]:
        """Half-open index range of grid steps covering [low, high] offsets"""
        start = int(math.floor(low / step))
        stop = int(math.ceil(high / step))
        return max(start, 0), min(stop, count)
