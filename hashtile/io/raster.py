"""
GeoTIFF reader using Rasterio

Decodes a georeferenced raster into a RawImage.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import numpy as np
import rasterio
from numpy.typing import NDArray
from rasterio.crs import CRS
from rasterio.warp import transform_bounds

from hashtile.core.geobox import GeoBox
from hashtile.core.image import RawImage

logger = logging.getLogger(__name__)

WGS84 = CRS.from_epsg(4326)

# TIFF DateTime tag format ("YYYY:MM:DD HH:MM:SS")
TIFF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


class RasterReader:
    """
    GeoTIFF reader using Rasterio

    Attributes:
        file_path: Path to the raster file
        dataset: Rasterio dataset handle

    Examples:
        >>> with RasterReader("scene.tif") as reader:
        ...     box = reader.get_geo_box()
        ...     image = reader.to_raw_image(timestamp=1718409600000)
    """

    def __init__(self, file_path: str):
        """
        Open raster file with Rasterio

        Args:
            file_path: Path to raster file

        Raises:
            rasterio.errors.RasterioIOError: If file can't be opened
        """
        self.file_path = str(file_path)
        self.dataset = rasterio.open(self.file_path, "r")

    def read(self) -> NDArray:
        """
        Read all bands as a (height, width, bands) array

        Rasterio returns band-first arrays; pixels are reordered to be
        interleaved.
        """
        return np.moveaxis(self.dataset.read(), 0, -1)

    def get_metadata(self) -> dict[str, Any]:
        """
        Extract metadata from raster

        Returns:
            Dictionary with crs, transform, bounds, width, height, count,
            dtype, nodata and tags
        """
        return {
            "crs": self.dataset.crs,
            "transform": self.dataset.transform,
            "bounds": self.dataset.bounds,
            "width": self.dataset.width,
            "height": self.dataset.height,
            "count": self.dataset.count,
            "dtype": self.dataset.dtypes[0],
            "nodata": self.dataset.nodata,
            "tags": self.dataset.tags(),
        }

    def get_geo_box(self) -> GeoBox:
        """
        Footprint of the raster in WGS84

        Rasters in a projected CRS are reduced to their WGS84 envelope; the
        linear pixel mapping is then only an approximation.
        """
        crs = self.dataset.crs
        if crs is None or crs == WGS84:
            bounds = self.dataset.bounds
        else:
            logger.warning(
                "%s uses %s; pixel mapping assumes a linear WGS84 grid", self.file_path, crs
            )
            bounds = transform_bounds(crs, WGS84, *self.dataset.bounds)

        return GeoBox.from_bounds(*bounds)

    def get_timestamp(self) -> Optional[int]:
        """Capture time from the TIFF DateTime tag in epoch milliseconds (UTC)"""
        value = self.dataset.tags().get("TIFFTAG_DATETIME")
        if not value:
            return None

        try:
            captured = datetime.strptime(value, TIFF_DATETIME_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            logger.warning("Unparseable TIFFTAG_DATETIME %r in %s", value, self.file_path)
            return None

        return int(captured.timestamp() * 1000)

    def to_raw_image(self, timestamp: Optional[int] = None) -> RawImage:
        """
        Decode the raster into a RawImage

        Args:
            timestamp: Capture time in epoch milliseconds; read from the
                TIFF DateTime tag when omitted

        Raises:
            ValueError: If no timestamp is given and the file has none
        """
        if timestamp is None:
            timestamp = self.get_timestamp()
        if timestamp is None:
            raise ValueError(f"No timestamp given and none found in {self.file_path}")

        return RawImage(self.read(), self.get_geo_box(), timestamp, nodata=self.dataset.nodata)

    def close(self):
        if self.dataset is not None:
            self.dataset.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    def __repr__(self) -> str:
        if self.dataset.closed:
            return f"<RasterReader (closed): {self.file_path}>"
        return (
            f"<RasterReader: {self.file_path}>\n"
            f"  Size: {self.dataset.width} x {self.dataset.height}\n"
            f"  Bands: {self.dataset.count}\n"
            f"  CRS: {self.dataset.crs}"
        )


def load_raw_image(file_path: str, timestamp: Optional[int] = None) -> RawImage:
    """
    Decode a raster file into a RawImage

    Examples:
        >>> image = load_raw_image("scene.tif", timestamp=1718409600000)
    """
    with RasterReader(file_path) as reader:
        return reader.to_raw_image(timestamp)
