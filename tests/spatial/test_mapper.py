"""
Tests for CoordinateMapper
"""

import pytest
from rasterio.windows import Window

from hashtile.core.exceptions import DegenerateRegionError
from hashtile.core.geobox import GeoBox
from hashtile.grid.geohash import GeohashGrid, decode_box
from hashtile.spatial.mapper import (
    CoordinateMapper,
    PixelRect,
    geo_to_pixel,
    pixel_to_geo,
    to_geo,
    to_pixel,
    to_window,
)


class TestToPixel:
    """Test geographic to pixel rectangle mapping"""

    @pytest.fixture
    def image_box(self):
        return GeoBox(0.0, 1.0, 0.0, 1.0)

    def test_full_image(self, image_box):
        """Test the image footprint maps to the whole raster"""
        assert to_pixel(image_box, image_box, 1000, 800) == PixelRect(0, 0, 1000, 800)

    def test_north_west_quarter(self, image_box):
        """Test row 0 is the northern edge"""
        rect = to_pixel(GeoBox(0.5, 1.0, 0.0, 0.5), image_box, 1000, 1000)
        assert rect == PixelRect(x_min=0, y_min=0, x_max=500, y_max=500)

    def test_south_east_quarter(self, image_box):
        """Test the south-east quarter maps to the bottom-right pixels"""
        rect = to_pixel(GeoBox(0.0, 0.5, 0.5, 1.0), image_box, 1000, 1000)
        assert rect == PixelRect(x_min=500, y_min=500, x_max=1000, y_max=1000)

    def test_outward_rounding(self, image_box):
        """Test minimums are floored and maximums ceiled"""
        rect = to_pixel(GeoBox(0.2501, 0.7499, 0.2501, 0.7499), image_box, 1000, 1000)
        assert rect == PixelRect(250, 250, 750, 750)

    def test_sub_pixel_region(self, image_box):
        """Test a region smaller than a pixel still maps to one pixel"""
        rect = to_pixel(GeoBox(0.5001, 0.5002, 0.5001, 0.5002), image_box, 1000, 1000)
        assert rect.width == 1
        assert rect.height == 1

    def test_clamped_to_raster(self, image_box):
        """Test regions extending past the footprint are clamped"""
        rect = to_pixel(GeoBox(-10.0, 0.5, -10.0, 0.5), image_box, 1000, 1000)
        assert rect == PixelRect(x_min=0, y_min=500, x_max=500, y_max=1000)

        rect = to_pixel(GeoBox(-45.0, 45.0, -45.0, 45.0), image_box, 1000, 1000)
        assert rect == PixelRect(0, 0, 1000, 1000)

    def test_non_square_pixels(self):
        """Test independent x and y scales"""
        image_box = GeoBox(10.0, 12.0, 20.0, 24.0)
        rect = to_pixel(GeoBox(11.0, 12.0, 22.0, 24.0), image_box, 400, 100)
        assert rect == PixelRect(x_min=200, y_min=0, x_max=400, y_max=50)

    def test_outside_raises(self, image_box):
        """Test regions beyond the footprint are degenerate"""
        with pytest.raises(DegenerateRegionError):
            to_pixel(GeoBox(2.0, 3.0, 2.0, 3.0), image_box, 1000, 1000)

    def test_touching_edge_raises(self, image_box):
        """Test regions sharing only an edge are degenerate"""
        with pytest.raises(DegenerateRegionError):
            to_pixel(GeoBox(0.0, 1.0, 1.0, 2.0), image_box, 1000, 1000)
        with pytest.raises(DegenerateRegionError):
            to_pixel(GeoBox(-1.0, 0.0, 0.0, 1.0), image_box, 1000, 1000)

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-1, 10)])
    def test_invalid_size(self, image_box, size):
        """Test non-positive raster sizes raise"""
        with pytest.raises(ValueError):
            to_pixel(image_box, image_box, *size)


class TestToGeo:
    """Test the inverse mapping"""

    def test_full_rect(self):
        """Test the whole raster maps back to the footprint"""
        image_box = GeoBox(36.5625, 37.96875, 126.5625, 127.96875)
        assert to_geo(PixelRect(0, 0, 64, 64), image_box, 64, 64) == image_box

    def test_quarter(self):
        """Test the north-west quarter"""
        image_box = GeoBox(0.0, 1.0, 0.0, 1.0)
        assert to_geo(PixelRect(0, 0, 500, 500), image_box, 1000, 1000) == GeoBox(0.5, 1.0, 0.0, 0.5)

    def test_pixel_rect_overlaps_cell(self):
        """Test every cell's pixel rectangle maps back onto the cell"""
        image_box = GeoBox(37.1, 37.9, 127.2, 127.7)
        width, height = 333, 517
        for cell in GeohashGrid().cells_for(image_box, 4):
            rect = to_pixel(cell.geo_box, image_box, width, height)
            back = to_geo(rect, image_box, width, height)
            assert back.intersect(cell.geo_box) is not None
            assert image_box.contains(back)


class TestPointMapping:
    """Test point conversions"""

    def test_corners(self):
        """Test image corners"""
        image_box = GeoBox(0.0, 1.0, 0.0, 1.0)
        assert geo_to_pixel(1.0, 0.0, image_box, 1000, 1000) == (0.0, 0.0)
        assert geo_to_pixel(0.0, 1.0, image_box, 1000, 1000) == (1000.0, 1000.0)
        assert pixel_to_geo(0, 0, image_box, 1000, 1000) == (1.0, 0.0)
        assert pixel_to_geo(1000, 1000, image_box, 1000, 1000) == (0.0, 1.0)

    def test_roundtrip(self):
        """Test point mapping round-trips"""
        image_box = GeoBox(37.0, 38.0, 127.0, 129.0)
        x, y = geo_to_pixel(37.25, 128.5, image_box, 200, 100)
        assert (x, y) == (150.0, 75.0)
        lat, lon = pixel_to_geo(x, y, image_box, 200, 100)
        assert lat == pytest.approx(37.25)
        assert lon == pytest.approx(128.5)


class TestPixelRect:
    """Test PixelRect helpers"""

    def test_dimensions(self):
        rect = PixelRect(10, 20, 50, 80)
        assert rect.width == 40
        assert rect.height == 60

    def test_slices(self):
        """Test slices index rows then columns"""
        rect = PixelRect(10, 20, 50, 80)
        assert rect.slices == (slice(20, 80), slice(10, 50))

    def test_to_window(self):
        """Test conversion to a rasterio Window"""
        window = to_window(PixelRect(250, 100, 300, 160))
        assert window == Window(col_off=250, row_off=100, width=50, height=60)


class TestCoordinateMapper:
    """Test the bound mapper"""

    @pytest.fixture
    def mapper(self):
        return CoordinateMapper(GeoBox(0.0, 1.0, 0.0, 1.0), 1000, 1000)

    def test_to_pixel(self, mapper):
        assert mapper.to_pixel(GeoBox(0.0, 0.25, 0.75, 1.0)) == PixelRect(750, 750, 1000, 1000)

    def test_to_geo(self, mapper):
        assert mapper.to_geo(PixelRect(750, 750, 1000, 1000)) == GeoBox(0.0, 0.25, 0.75, 1.0)

    def test_points(self, mapper):
        assert mapper.geo_to_pixel(0.5, 0.5) == (500.0, 500.0)
        assert mapper.pixel_to_geo(500, 500) == (0.5, 0.5)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            CoordinateMapper(GeoBox(0.0, 1.0, 0.0, 1.0), 0, 10)

    def test_geohash_cell_in_cell_image(self):
        """Test a child cell of an exactly covered parent maps to whole pixels"""
        parent = decode_box("wyd")
        mapper = CoordinateMapper(parent, 64, 64)
        rect = mapper.to_pixel(decode_box("wyd0"))
        assert (rect.width, rect.height) == (16, 8)
