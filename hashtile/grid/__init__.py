"""
hashtile Grid Module

Geohash grid system for partitioning images into cells.
"""

from hashtile.grid.base import CellGrid
from hashtile.grid.geohash import (
    GeohashCell,
    GeohashGrid,
    cell_dimensions,
    decode_box,
    decode_center,
    encode,
)

__all__ = [
    "CellGrid",
    "GeohashCell",
    "GeohashGrid",
    "cell_dimensions",
    "decode_box",
    "decode_center",
    "encode",
]
