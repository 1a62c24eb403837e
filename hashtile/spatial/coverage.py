"""
Coverage Calculator

Fraction of a geohash cell covered by an image footprint, and the
threshold rule deciding whether a cell is extracted.
"""

from enum import Enum

from hashtile.core.geobox import GeoBox
from hashtile.grid.geohash import GeohashCell


class CoverageBoundary(str, Enum):
    """
    How the minimum coverage threshold treats a value equal to it

    INCLUSIVE keeps cells with coverage >= threshold,
    EXCLUSIVE keeps cells with coverage > threshold.
    """

    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


def coverage(image_box: GeoBox, cell: GeohashCell) -> float:
    """
    Fraction of a cell's area covered by an image

    Areas are planar (square degrees). Both boxes are always at the same
    latitude, so the ratio is consistent even though absolute areas are not.

    Args:
        image_box: Footprint of the image
        cell: Candidate geohash cell

    Returns:
        Coverage in [0.0, 1.0]; exactly 1.0 when the image contains the cell

    Examples:
        >>> cell = GeohashCell.from_id("s")  # 0-45N, 0-45E
        >>> coverage(GeoBox(0.0, 45.0, 0.0, 22.5), cell)
        0.5
    """
    overlap = image_box.intersect(cell.geo_box)
    if overlap is None:
        return 0.0

    # Containment short-circuits so full cells are exactly 1.0
    if overlap == cell.geo_box:
        return 1.0

    return min(max(overlap.area() / cell.geo_box.area(), 0.0), 1.0)


def is_eligible(
    value: float,
    min_coverage: float,
    boundary: CoverageBoundary = CoverageBoundary.INCLUSIVE,
) -> bool:
    """True when a coverage value passes the threshold"""
    if CoverageBoundary(boundary) is CoverageBoundary.EXCLUSIVE:
        return value > min_coverage
    return value >= min_coverage


class CoverageCalculator:
    """
    Coverage evaluation against a fixed image footprint and threshold

    Attributes:
        image_box: Footprint of the image
        min_coverage: Threshold in [0.0, 1.0]
        boundary: Whether the threshold itself passes

    Examples:
        >>> calc = CoverageCalculator(GeoBox(0.0, 45.0, 0.0, 45.0), min_coverage=1.0)
        >>> calc.evaluate(GeohashCell.from_id("s"))
        (1.0, True)
    """

    def __init__(
        self,
        image_box: GeoBox,
        min_coverage: float = 1.0,
        boundary: CoverageBoundary = CoverageBoundary.INCLUSIVE,
    ):
        self.image_box = image_box
        self.min_coverage = min_coverage
        self.boundary = CoverageBoundary(boundary)

    def coverage(self, cell: GeohashCell) -> float:
        return coverage(self.image_box, cell)

    def evaluate(self, cell: GeohashCell) -> tuple[float, bool]:
        """Coverage of a cell and whether it passes the threshold"""
        value = self.coverage(cell)
        return value, is_eligible(value, self.min_coverage, self.boundary)
