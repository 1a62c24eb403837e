"""
hashtile Spatial Module

Geographic/pixel coordinate mapping and cell coverage.
"""

from hashtile.spatial.coverage import (
    CoverageBoundary,
    CoverageCalculator,
    coverage,
    is_eligible,
)
from hashtile.spatial.mapper import (
    CoordinateMapper,
    PixelRect,
    geo_to_pixel,
    pixel_to_geo,
    to_geo,
    to_pixel,
    to_window,
)

__all__ = [
    "CoordinateMapper",
    "CoverageBoundary",
    "CoverageCalculator",
    "PixelRect",
    "coverage",
    "geo_to_pixel",
    "is_eligible",
    "pixel_to_geo",
    "to_geo",
    "to_pixel",
    "to_window",
]
