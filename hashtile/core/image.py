"""
Image Types

Source raster (RawImage) and the tiles cut from it (SpatiotemporalTile).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import numpy as np
from numpy.typing import DTypeLike, NDArray

from hashtile.core.exceptions import BufferMismatchError
from hashtile.core.geobox import GeoBox
from hashtile.grid.geohash import GeohashCell
from hashtile.spatial.mapper import CoordinateMapper, PixelRect


class RawImage:
    """
    Decoded raster with a geographic footprint and capture time

    Pixels are stored row-major as a (height, width, channels) array; row 0
    is the northern edge of the footprint. The array is copied on
    construction and made read-only, so tiles and worker threads can share it.

    Attributes:
        pixels: Read-only (H, W, C) pixel array
        geo_box: Geographic footprint
        timestamp: Capture time in epoch milliseconds
        nodata: Pixel value marking missing data, if any

    Examples:
        >>> pixels = np.zeros((100, 200, 3), dtype=np.uint8)
        >>> image = RawImage(pixels, GeoBox(37.0, 38.0, 127.0, 129.0), 1718409600000)
        >>> image.width, image.height, image.channel_count
        (200, 100, 3)
    """

    def __init__(
        self,
        pixels: NDArray,
        geo_box: GeoBox,
        timestamp: int,
        nodata: Optional[Union[int, float]] = None,
    ):
        array = np.array(pixels, copy=True)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise BufferMismatchError(
                f"Pixels must have shape (H, W) or (H, W, C), got {array.shape}"
            )
        if array.shape[0] == 0 or array.shape[1] == 0 or array.shape[2] == 0:
            raise BufferMismatchError(f"Pixel array is empty: {array.shape}")

        array.setflags(write=False)
        self.pixels = array
        self.geo_box = geo_box
        self.timestamp = int(timestamp)
        self.nodata = nodata

    @classmethod
    def from_buffer(
        cls,
        buffer: bytes,
        width: int,
        height: int,
        channel_count: int,
        geo_box: GeoBox,
        timestamp: int,
        dtype: DTypeLike = np.uint8,
        nodata: Optional[Union[int, float]] = None,
    ) -> "RawImage":
        """
        Build an image from a flat, row-major, pixel-interleaved buffer

        Args:
            buffer: Raw pixel bytes (length W*H*C*itemsize)
            width: Raster width in pixels
            height: Raster height in pixels
            channel_count: Samples per pixel
            geo_box: Geographic footprint
            timestamp: Capture time in epoch milliseconds
            dtype: Sample type (default: uint8)
            nodata: Pixel value marking missing data, if any

        Raises:
            BufferMismatchError: If the buffer length does not match the
                declared dimensions
        """
        if width <= 0 or height <= 0 or channel_count <= 0:
            raise BufferMismatchError(
                f"Dimensions must be positive, got {width}x{height}x{channel_count}"
            )

        dtype = np.dtype(dtype)
        expected = width * height * channel_count * dtype.itemsize
        if len(buffer) != expected:
            raise BufferMismatchError(
                f"Buffer holds {len(buffer)} bytes, expected {expected} "
                f"for {width}x{height}x{channel_count} {dtype}"
            )

        array = np.frombuffer(buffer, dtype=dtype).reshape(height, width, channel_count)
        return cls(array, geo_box, timestamp, nodata=nodata)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channel_count(self) -> int:
        return self.pixels.shape[2]

    @property
    def dtype(self) -> np.dtype:
        return self.pixels.dtype

    @property
    def mapper(self) -> CoordinateMapper:
        return CoordinateMapper(self.geo_box, self.width, self.height)

    def extract(self, rect: PixelRect) -> NDArray:
        """Copy of the pixels inside a rectangle, shape (h, w, C)"""
        rows, cols = rect.slices
        return self.pixels[rows, cols].copy()

    def valid_fraction(self, pixels: NDArray) -> float:
        """Fraction of pixels (all channels) that differ from nodata"""
        if self.nodata is None or pixels.size == 0:
            return 1.0
        valid = np.any(pixels != self.nodata, axis=-1)
        return float(valid.mean())

    def __repr__(self) -> str:
        return (
            f"<RawImage {self.width}x{self.height}x{self.channel_count} {self.dtype} "
            f"at {self.geo_box.bounds} t={self.timestamp}>"
        )


@dataclass(frozen=True, eq=False)
class SpatiotemporalTile:
    """
    Pixels of one geohash cell cut from a source image

    Attributes:
        pixels: Owned, read-only (h, w, C) pixel array
        timestamp: Capture time copied from the source image
        cell: Geohash cell the tile was extracted for
        coverage: Fraction of the cell covered by the source image
        rect: Pixel rectangle in the source image
        pixel_geo_box: Geographic extent of the extracted pixels
        valid_fraction: Fraction of pixels that are not nodata
    """

    pixels: NDArray
    timestamp: int
    cell: GeohashCell
    coverage: float
    rect: PixelRect
    pixel_geo_box: GeoBox
    valid_fraction: float = 1.0

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channel_count(self) -> int:
        return self.pixels.shape[2]

    @property
    def geohash_id(self) -> str:
        return self.cell.id

    @property
    def geohash_precision(self) -> int:
        return self.cell.precision

    @property
    def geo_box(self) -> GeoBox:
        return self.cell.geo_box

    @property
    def pixel_buffer(self) -> bytes:
        """Row-major, pixel-interleaved bytes"""
        return np.ascontiguousarray(self.pixels).tobytes()

    def metadata(self) -> Dict[str, Any]:
        """Everything but the pixels, as plain values"""
        return {
            "geohash": self.geohash_id,
            "precision": self.geohash_precision,
            "timestamp": self.timestamp,
            "coverage": self.coverage,
            "valid_fraction": self.valid_fraction,
            "width": self.width,
            "height": self.height,
            "channel_count": self.channel_count,
            "dtype": str(self.pixels.dtype),
            "cell_bounds": self.geo_box.bounds,
            "pixel_bounds": self.pixel_geo_box.bounds,
            "rect": (self.rect.x_min, self.rect.y_min, self.rect.x_max, self.rect.y_max),
        }

    def __repr__(self) -> str:
        return (
            f"<SpatiotemporalTile {self.geohash_id} {self.width}x{self.height} "
            f"coverage={self.coverage:.3f} t={self.timestamp}>"
        )
