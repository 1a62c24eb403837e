"""
hashtile - Split georeferenced images into geohash-aligned tiles

Cuts a raster with a latitude/longitude footprint and a capture time into
one tile per geohash cell it covers, lazily.

Quick Start:
    >>> import hashtile as ht
    >>>
    >>> image = ht.RawImage(pixels, ht.GeoBox(37.0, 38.0, 127.0, 128.0), 1718409600000)
    >>>
    >>> # Fully covered precision-4 cells
    >>> for tile in ht.split(image, precision=4):
    ...     print(tile.geohash_id, tile.width, tile.height)
    >>>
    >>> # From a GeoTIFF, into Arrow files
    >>> image = ht.load_raw_image("scene.tif", timestamp=1718409600000)
    >>> ht.ImageSplitter().split_to(image, ht.ArrowTileSink("./tiles"), precision=5)
"""

from hashtile.core import (
    BufferMismatchError,
    ConfigError,
    DegenerateRegionError,
    # Types
    GeoBox,
    # Exceptions
    HashTileError,
    # Pipeline
    ImageSplitter,
    InvalidBoundsError,
    InvalidGeohashError,
    InvalidPrecisionError,
    RawImage,
    SinkError,
    SpatiotemporalTile,
    SplitConfig,
    SplitState,
    SplitStats,
    TileCursor,
    split,
)
from hashtile.grid import GeohashCell, GeohashGrid, cell_dimensions, decode_box, encode
from hashtile.spatial import CoordinateMapper, CoverageBoundary, PixelRect, coverage

__version__ = "0.1.0"

__all__ = [
    "ArrowTileSink",
    "BufferMismatchError",
    "CallbackSink",
    "CollectingSink",
    "ConfigError",
    "CoordinateMapper",
    "CoverageBoundary",
    "DegenerateRegionError",
    "GeoBox",
    "GeoTiffTileSink",
    "GeohashCell",
    "GeohashGrid",
    "HashTileError",
    "ImageSplitter",
    "InvalidBoundsError",
    "InvalidGeohashError",
    "InvalidPrecisionError",
    "PixelRect",
    "RawImage",
    "SinkError",
    "SpatiotemporalTile",
    "SplitConfig",
    "SplitState",
    "SplitStats",
    "TileCursor",
    "__version__",
    "cell_dimensions",
    "coverage",
    "decode_box",
    "encode",
    "load_raw_image",
    "read_tile",
    "split",
]


# Lazy imports for I/O adapters (avoids loading pyarrow at startup)
def __getattr__(name):
    if name == "load_raw_image":
        from hashtile.io.raster import load_raw_image

        return load_raw_image
    elif name in ("ArrowTileSink", "CallbackSink", "CollectingSink", "GeoTiffTileSink", "read_tile"):
        from hashtile.io import sinks

        return getattr(sinks, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
