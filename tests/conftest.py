"""
hashtile Test Configuration

Shared pytest fixtures for all tests.
"""

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_bounds

from hashtile.core.geobox import GeoBox
from hashtile.core.image import RawImage
from hashtile.grid.geohash import decode_box

# 2024-06-15T00:00:00Z
SAMPLE_TIMESTAMP = 1718409600000

# Precision-3 cell over Seoul (36.5625-37.96875N, 126.5625-127.96875E)
SAMPLE_GEOHASH = "wyd"


@pytest.fixture
def sample_timestamp():
    """Standard capture time in epoch milliseconds"""
    return SAMPLE_TIMESTAMP


@pytest.fixture
def unit_box():
    """1° x 1° box at the origin"""
    return GeoBox(0.0, 1.0, 0.0, 1.0)


@pytest.fixture
def unit_image(unit_box):
    """1000 x 1000 single-band image over the unit box"""
    pixels = np.arange(1000 * 1000, dtype=np.uint32).reshape(1000, 1000) % 251
    return RawImage(pixels.astype(np.uint8), unit_box, SAMPLE_TIMESTAMP)


@pytest.fixture
def cell_box():
    """Box of the sample precision-3 geohash cell"""
    return decode_box(SAMPLE_GEOHASH)


@pytest.fixture
def cell_image(cell_box):
    """64 x 64 three-band image exactly covering the sample geohash cell"""
    rows, cols = np.mgrid[0:64, 0:64]
    pixels = np.stack([rows, cols, rows + cols], axis=-1).astype(np.uint8)
    return RawImage(pixels, cell_box, SAMPLE_TIMESTAMP)


@pytest.fixture
def geotiff_path(tmp_path, cell_box):
    """64 x 64 four-band uint16 GeoTIFF exactly covering the sample geohash cell"""
    path = tmp_path / "scene.tif"
    width, height = 64, 64
    transform = from_bounds(*cell_box.bounds, width, height)

    data = np.random.default_rng(42).integers(1, 4000, (4, height, width), dtype=np.uint16)
    data[:, :, :8] = 0  # nodata strip along the western edge

    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=4,
        dtype=np.uint16,
        crs="EPSG:4326",
        transform=transform,
        nodata=0,
    ) as dst:
        dst.write(data)
        dst.update_tags(TIFFTAG_DATETIME="2024:06:15 00:00:00")

    return str(path)
