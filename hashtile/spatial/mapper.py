"""
Coordinate Mapper

Maps between geographic coordinates and pixel coordinates of a raster whose
footprint is an axis-aligned GeoBox with a linear (plate carrée) projection:
pixel x runs west to east across [min_lon, max_lon] and pixel y runs north
to south across [max_lat, min_lat], so row 0 is the northernmost row.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from rasterio.windows import Window

from hashtile.core.exceptions import DegenerateRegionError
from hashtile.core.geobox import GeoBox


@dataclass(frozen=True)
class PixelRect:
    """
    Half-open pixel rectangle [x_min, x_max) x [y_min, y_max)

    Attributes:
        x_min: First column
        y_min: First row
        x_max: Column after the last one
        y_max: Row after the last one
    """

    x_min: int
    y_min: int
    x_max: int
    y_max: int

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min

    @property
    def slices(self) -> Tuple[slice, slice]:
        """(row slice, column slice) for indexing a (H, W, ...) array"""
        return (slice(self.y_min, self.y_max), slice(self.x_min, self.x_max))


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Raster size must be positive, got {width} x {height}")


def to_pixel(geo_box: GeoBox, image_box: GeoBox, width: int, height: int) -> PixelRect:
    """
    Pixel rectangle covering a geographic region of an image

    Minimums are floored and maximums ceiled, so the rectangle never excludes
    area the region covers; adjacent regions may share a row or column.
    The result is clamped to the raster, since a region may extend past the
    image footprint.

    Args:
        geo_box: Region to map (e.g., a geohash cell)
        image_box: Footprint of the image
        width: Raster width in pixels
        height: Raster height in pixels

    Returns:
        PixelRect inside [0, width] x [0, height]

    Raises:
        DegenerateRegionError: If the clamped rectangle is empty

    Examples:
        >>> image = GeoBox(0.0, 1.0, 0.0, 1.0)
        >>> to_pixel(GeoBox(0.5, 1.0, 0.0, 0.5), image, 1000, 1000)
        PixelRect(x_min=0, y_min=0, x_max=500, y_max=500)
    """
    _check_size(width, height)

    x_min = math.floor((geo_box.min_lon - image_box.min_lon) / image_box.lon_span * width)
    x_max = math.ceil((geo_box.max_lon - image_box.min_lon) / image_box.lon_span * width)

    # Latitude axis is inverted: row 0 is max_lat
    y_min = math.floor((image_box.max_lat - geo_box.max_lat) / image_box.lat_span * height)
    y_max = math.ceil((image_box.max_lat - geo_box.min_lat) / image_box.lat_span * height)

    rect = PixelRect(
        x_min=min(max(x_min, 0), width),
        y_min=min(max(y_min, 0), height),
        x_max=min(max(x_max, 0), width),
        y_max=min(max(y_max, 0), height),
    )

    if rect.width <= 0 or rect.height <= 0:
        raise DegenerateRegionError(
            f"Region {geo_box} maps to an empty pixel rectangle {rect} "
            f"in a {width}x{height} image at {image_box}"
        )

    return rect


def to_geo(rect: PixelRect, image_box: GeoBox, width: int, height: int) -> GeoBox:
    """
    Geographic extent of a pixel rectangle

    Inverse of to_pixel for rectangles on pixel boundaries.
    """
    _check_size(width, height)

    min_lon = image_box.min_lon + rect.x_min / width * image_box.lon_span
    max_lon = image_box.min_lon + rect.x_max / width * image_box.lon_span
    max_lat = image_box.max_lat - rect.y_min / height * image_box.lat_span
    min_lat = image_box.max_lat - rect.y_max / height * image_box.lat_span

    return GeoBox(
        min_lat=max(min_lat, image_box.min_lat),
        max_lat=min(max_lat, image_box.max_lat),
        min_lon=max(min_lon, image_box.min_lon),
        max_lon=min(max_lon, image_box.max_lon),
    )


def geo_to_pixel(
    lat: float, lon: float, image_box: GeoBox, width: int, height: int
) -> Tuple[float, float]:
    """Fractional pixel position (x, y) of a point; not clamped"""
    _check_size(width, height)
    x = (lon - image_box.min_lon) / image_box.lon_span * width
    y = (image_box.max_lat - lat) / image_box.lat_span * height
    return (x, y)


def pixel_to_geo(
    x: float, y: float, image_box: GeoBox, width: int, height: int
) -> Tuple[float, float]:
    """Geographic position (lat, lon) of a fractional pixel position"""
    _check_size(width, height)
    lon = image_box.min_lon + x / width * image_box.lon_span
    lat = image_box.max_lat - y / height * image_box.lat_span
    return (lat, lon)


def to_window(rect: PixelRect) -> Window:
    """rasterio Window for a pixel rectangle (for windowed reads)"""
    return Window(col_off=rect.x_min, row_off=rect.y_min, width=rect.width, height=rect.height)


class CoordinateMapper:
    """
    Coordinate mapper bound to one image

    Attributes:
        image_box: Footprint of the image
        width: Raster width in pixels
        height: Raster height in pixels

    Examples:
        >>> mapper = CoordinateMapper(GeoBox(0.0, 1.0, 0.0, 1.0), 1000, 1000)
        >>> mapper.to_pixel(GeoBox(0.0, 0.25, 0.75, 1.0))
        PixelRect(x_min=750, y_min=750, x_max=1000, y_max=1000)
    """

    def __init__(self, image_box: GeoBox, width: int, height: int):
        _check_size(width, height)
        self.image_box = image_box
        self.width = width
        self.height = height

    def to_pixel(self, geo_box: GeoBox) -> PixelRect:
        return to_pixel(geo_box, self.image_box, self.width, self.height)

    def to_geo(self, rect: PixelRect) -> GeoBox:
        return to_geo(rect, self.image_box, self.width, self.height)

    def geo_to_pixel(self, lat: float, lon: float) -> Tuple[float, float]:
        return geo_to_pixel(lat, lon, self.image_box, self.width, self.height)

    def pixel_to_geo(self, x: float, y: float) -> Tuple[float, float]:
        return pixel_to_geo(x, y, self.image_box, self.width, self.height)

    def __repr__(self) -> str:
        return f"CoordinateMapper({self.image_box}, {self.width}x{self.height})"
