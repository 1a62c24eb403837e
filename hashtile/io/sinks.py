"""
Tile Sinks

Receivers for tiles produced by the splitter. The splitter only knows the
TileSink protocol; where tiles end up is up to the sink.

- CollectingSink: keeps tiles in memory
- CallbackSink: forwards each tile to a function
- ArrowTileSink: one Arrow IPC file per tile (read back with read_tile)
- GeoTiffTileSink: one georeferenced GeoTIFF per tile
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Union

import numpy as np
import pyarrow as pa
import pyarrow.ipc as ipc
import rasterio
from rasterio.errors import RasterioError
from rasterio.transform import from_bounds

from hashtile.core.exceptions import SinkError
from hashtile.core.geobox import GeoBox
from hashtile.core.image import SpatiotemporalTile
from hashtile.grid.geohash import GeohashCell
from hashtile.spatial.mapper import PixelRect

logger = logging.getLogger(__name__)


class TileSink(Protocol):
    """Receiver of tiles"""

    def send(self, tile: SpatiotemporalTile) -> None:
        """
        Accept one tile

        Raises:
            SinkError: If the tile cannot be accepted
        """
        ...


class CollectingSink:
    """
    Keep every tile in memory

    Examples:
        >>> sink = CollectingSink()
        >>> ImageSplitter().split_to(image, sink)
        >>> [tile.geohash_id for tile in sink.tiles]
    """

    def __init__(self):
        self.tiles: List[SpatiotemporalTile] = []

    def send(self, tile: SpatiotemporalTile) -> None:
        self.tiles.append(tile)

    def __len__(self) -> int:
        return len(self.tiles)


class CallbackSink:
    """Forward every tile to a function"""

    def __init__(self, callback: Callable[[SpatiotemporalTile], None]):
        self.callback = callback

    def send(self, tile: SpatiotemporalTile) -> None:
        self.callback(tile)


class ArrowTileSink:
    """
    Write each tile to an Arrow IPC file

    File naming convention:
        {directory}/{geohash}/{timestamp}.arrow

    Arrow Schema:
        - time: timestamp[ms] - Capture time of the source image
        - pixels: binary - Row-major, pixel-interleaved samples

    Tile metadata (geohash, precision, coverage, shape, dtype, bounds) is
    stored as schema metadata.

    Examples:
        >>> sink = ArrowTileSink("./tiles")
        >>> ImageSplitter().split_to(image, sink)
        >>> tile = read_tile(sink.written[0])
    """

    SCHEMA = pa.schema([
        ("time", pa.timestamp("ms", tz="UTC")),
        ("pixels", pa.binary()),
    ])

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.written: List[Path] = []

    def path_for(self, tile: SpatiotemporalTile) -> Path:
        return self.directory / tile.geohash_id / f"{tile.timestamp}.arrow"

    def send(self, tile: SpatiotemporalTile) -> None:
        path = self.path_for(tile)
        try:
            write_tile(tile, path)
        except (OSError, pa.ArrowException) as e:
            raise SinkError(f"Failed to write tile {tile.geohash_id} to {path}: {e}") from e

        self.written.append(path)
        logger.debug("Wrote %s", path)


def _tile_schema_metadata(tile: SpatiotemporalTile) -> dict:
    meta = tile.metadata()
    return {
        "geohash": meta["geohash"],
        "precision": str(meta["precision"]),
        "coverage": repr(meta["coverage"]),
        "valid_fraction": repr(meta["valid_fraction"]),
        "width": str(meta["width"]),
        "height": str(meta["height"]),
        "channel_count": str(meta["channel_count"]),
        "dtype": meta["dtype"],
        "pixel_bounds": json.dumps(meta["pixel_bounds"]),
        "rect": json.dumps(meta["rect"]),
    }


def write_tile(tile: SpatiotemporalTile, path: Union[str, Path]) -> None:
    """
    Write a tile to an Arrow IPC file

    Args:
        tile: Tile to write
        path: Output file path (parent directories are created)
    """
    time_array = pa.array([tile.timestamp], type=pa.timestamp("ms", tz="UTC"))
    pixels_array = pa.array([tile.pixel_buffer], type=pa.binary())

    batch = pa.RecordBatch.from_arrays(
        [time_array, pixels_array],
        schema=ArrowTileSink.SCHEMA,
    )
    schema_with_metadata = ArrowTileSink.SCHEMA.with_metadata(_tile_schema_metadata(tile))

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pa.OSFile(str(path), "wb") as sink:
        with ipc.new_file(sink, schema_with_metadata) as writer:
            writer.write_batch(batch)


def read_tile(path: Union[str, Path]) -> SpatiotemporalTile:
    """
    Read a tile written by ArrowTileSink

    Args:
        path: Arrow IPC file path

    Returns:
        The reconstructed SpatiotemporalTile

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is not a tile file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Tile file not found: {path}")

    with pa.OSFile(str(path), "rb") as source:
        table = ipc.open_file(source).read_all()

    raw_meta = table.schema.metadata or {}
    meta = {k.decode(): v.decode() for k, v in raw_meta.items()}
    if "geohash" not in meta or table.num_rows != 1:
        raise ValueError(f"Not a tile file: {path}")

    width = int(meta["width"])
    height = int(meta["height"])
    channel_count = int(meta["channel_count"])
    buffer = table.column("pixels")[0].as_py()
    pixels = np.frombuffer(buffer, dtype=np.dtype(meta["dtype"])).reshape(
        height, width, channel_count
    ).copy()
    pixels.setflags(write=False)

    timestamp = table.column("time")[0].value

    return SpatiotemporalTile(
        pixels=pixels,
        timestamp=int(timestamp),
        cell=GeohashCell.from_id(meta["geohash"]),
        coverage=float(meta["coverage"]),
        rect=PixelRect(*json.loads(meta["rect"])),
        pixel_geo_box=GeoBox.from_bounds(*json.loads(meta["pixel_bounds"])),
        valid_fraction=float(meta["valid_fraction"]),
    )


class GeoTiffTileSink:
    """
    Write each tile to a GeoTIFF in EPSG:4326

    Files are named {geohash}_{timestamp}.tif; the geohash, coverage and
    timestamp are written as dataset tags.

    Attributes:
        directory: Output directory
        nodata: Nodata value to declare on written files
        written: Paths written so far
    """

    def __init__(self, directory: Union[str, Path], nodata: Optional[float] = None):
        self.directory = Path(directory)
        self.nodata = nodata
        self.written: List[Path] = []

    def path_for(self, tile: SpatiotemporalTile) -> Path:
        return self.directory / f"{tile.geohash_id}_{tile.timestamp}.tif"

    def send(self, tile: SpatiotemporalTile) -> None:
        path = self.path_for(tile)
        transform = from_bounds(*tile.pixel_geo_box.bounds, tile.width, tile.height)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with rasterio.open(
                path,
                "w",
                driver="GTiff",
                height=tile.height,
                width=tile.width,
                count=tile.channel_count,
                dtype=tile.pixels.dtype,
                crs="EPSG:4326",
                transform=transform,
                nodata=self.nodata,
            ) as dst:
                dst.write(np.moveaxis(tile.pixels, -1, 0))
                dst.update_tags(
                    GEOHASH=tile.geohash_id,
                    COVERAGE=repr(tile.coverage),
                    TIMESTAMP=str(tile.timestamp),
                )
        except (OSError, RasterioError) as e:
            raise SinkError(f"Failed to write tile {tile.geohash_id} to {path}: {e}") from e

        self.written.append(path)
        logger.debug("Wrote %s", path)
