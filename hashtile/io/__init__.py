"""
hashtile I/O Module

Raster decoding and tile sinks.
"""

from hashtile.io.raster import RasterReader, load_raw_image
from hashtile.io.sinks import (
    ArrowTileSink,
    CallbackSink,
    CollectingSink,
    GeoTiffTileSink,
    TileSink,
    read_tile,
    write_tile,
)

__all__ = [
    "ArrowTileSink",
    "CallbackSink",
    "CollectingSink",
    "GeoTiffTileSink",
    "RasterReader",
    "TileSink",
    "load_raw_image",
    "read_tile",
    "write_tile",
]
