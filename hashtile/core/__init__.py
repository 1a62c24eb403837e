"""
hashtile Core Module

Value types, exceptions, and the image splitting pipeline.
"""

from hashtile.core.exceptions import (
    BufferMismatchError,
    ConfigError,
    DegenerateRegionError,
    HashTileError,
    InvalidBoundsError,
    InvalidGeohashError,
    InvalidPrecisionError,
    SinkError,
)
from hashtile.core.geobox import GeoBox
from hashtile.core.image import RawImage, SpatiotemporalTile
from hashtile.core.splitter import (
    ImageSplitter,
    SplitConfig,
    SplitState,
    SplitStats,
    TileCursor,
    split,
)

__all__ = [
    # Types
    "GeoBox",
    "RawImage",
    "SpatiotemporalTile",
    # Pipeline
    "ImageSplitter",
    "SplitConfig",
    "SplitState",
    "SplitStats",
    "TileCursor",
    "split",
    # Exceptions
    "HashTileError",
    "InvalidBoundsError",
    "InvalidPrecisionError",
    "InvalidGeohashError",
    "DegenerateRegionError",
    "BufferMismatchError",
    "ConfigError",
    "SinkError",
]
