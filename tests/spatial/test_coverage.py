"""
Tests for coverage calculation
"""

import pytest

from hashtile.core.geobox import GeoBox
from hashtile.grid.geohash import GeohashCell, GeohashGrid
from hashtile.spatial.coverage import (
    CoverageBoundary,
    CoverageCalculator,
    coverage,
    is_eligible,
)


class TestCoverage:
    """Test coverage()"""

    @pytest.fixture
    def cell(self):
        """Precision-1 cell 's' (0-45N, 0-45E)"""
        return GeohashCell.from_id("s")

    def test_full_containment_is_exactly_one(self, cell):
        """Test an image containing the cell covers it fully"""
        assert coverage(GeoBox(-10.0, 50.0, -10.0, 50.0), cell) == 1.0
        assert coverage(cell.geo_box, cell) == 1.0

    def test_full_containment_fine_cells(self):
        """Test fully contained fine cells are exactly 1.0"""
        image_box = GeoBox(37.1, 37.9, 127.2, 127.7)
        for cell in GeohashGrid().cells_for(image_box, 5):
            if image_box.contains(cell.geo_box):
                assert coverage(image_box, cell) == 1.0

    def test_half(self, cell):
        """Test an image over the western half"""
        assert coverage(GeoBox(0.0, 45.0, 0.0, 22.5), cell) == 0.5

    def test_quarter(self, cell):
        """Test an image over the south-west quarter"""
        assert coverage(GeoBox(0.0, 22.5, 0.0, 22.5), cell) == 0.25

    def test_normalised_by_cell_area(self, cell):
        """Test coverage is relative to the cell, not the image"""
        assert coverage(GeoBox(0.0, 1.0, 0.0, 1.0), cell) == pytest.approx(1.0 / 2025.0)

    def test_disjoint(self, cell):
        """Test an image elsewhere covers nothing"""
        assert coverage(GeoBox(-30.0, -20.0, -30.0, -20.0), cell) == 0.0

    def test_touching(self, cell):
        """Test an image sharing an edge covers nothing"""
        assert coverage(GeoBox(45.0, 50.0, 0.0, 45.0), cell) == 0.0

    def test_range(self):
        """Test coverage stays in [0, 1]"""
        image_box = GeoBox(37.123, 37.876, 127.234, 127.765)
        for cell in GeohashGrid().cells_for(image_box, 4):
            value = coverage(image_box, cell)
            assert 0.0 <= value <= 1.0

    def test_monotonic_under_shrinking(self):
        """Test shrinking the image never increases coverage"""
        cells = list(GeohashGrid().cells_for(GeoBox(37.0, 38.0, 127.0, 128.0), 3))
        boxes = [
            GeoBox(37.0, 38.0, 127.0, 128.0),
            GeoBox(37.1, 37.9, 127.1, 127.9),
            GeoBox(37.2, 37.9, 127.3, 127.8),
            GeoBox(37.5, 37.6, 127.5, 127.6),
        ]
        for cell in cells:
            values = [coverage(box, cell) for box in boxes]
            assert values == sorted(values, reverse=True)


class TestEligibility:
    """Test the threshold rule"""

    def test_inclusive(self):
        """Test inclusive boundary keeps values equal to the threshold"""
        assert is_eligible(1.0, 1.0, CoverageBoundary.INCLUSIVE)
        assert is_eligible(0.5, 0.5, CoverageBoundary.INCLUSIVE)
        assert not is_eligible(0.999, 1.0, CoverageBoundary.INCLUSIVE)

    def test_exclusive(self):
        """Test exclusive boundary rejects values equal to the threshold"""
        assert not is_eligible(0.5, 0.5, CoverageBoundary.EXCLUSIVE)
        assert is_eligible(0.51, 0.5, CoverageBoundary.EXCLUSIVE)
        assert not is_eligible(1.0, 1.0, CoverageBoundary.EXCLUSIVE)

    def test_default_is_inclusive(self):
        assert is_eligible(1.0, 1.0)

    def test_zero_threshold(self):
        """Test a zero threshold keeps even untouched cells when inclusive"""
        assert is_eligible(0.0, 0.0, CoverageBoundary.INCLUSIVE)
        assert not is_eligible(0.0, 0.0, CoverageBoundary.EXCLUSIVE)

    def test_boundary_from_string(self):
        """Test boundaries accept their string values"""
        assert is_eligible(0.5, 0.5, "inclusive")
        assert not is_eligible(0.5, 0.5, "exclusive")
        with pytest.raises(ValueError):
            is_eligible(0.5, 0.5, "sideways")


class TestCoverageCalculator:
    """Test CoverageCalculator"""

    def test_evaluate_full(self):
        calc = CoverageCalculator(GeoBox(0.0, 45.0, 0.0, 45.0), min_coverage=1.0)
        assert calc.evaluate(GeohashCell.from_id("s")) == (1.0, True)

    def test_evaluate_partial(self):
        calc = CoverageCalculator(GeoBox(0.0, 45.0, 0.0, 22.5), min_coverage=1.0)
        assert calc.evaluate(GeohashCell.from_id("s")) == (0.5, False)

    def test_evaluate_partial_below_lower_threshold(self):
        calc = CoverageCalculator(
            GeoBox(0.0, 45.0, 0.0, 22.5), min_coverage=0.5, boundary=CoverageBoundary.EXCLUSIVE
        )
        assert calc.evaluate(GeohashCell.from_id("s")) == (0.5, False)

    def test_defaults(self):
        calc = CoverageCalculator(GeoBox(0.0, 45.0, 0.0, 45.0))
        assert calc.min_coverage == 1.0
        assert calc.boundary is CoverageBoundary.INCLUSIVE
