"""
Split CLI command

Splits a GeoTIFF into geohash tiles and writes them to a directory.
"""

import argparse
import logging
from pathlib import Path

from hashtile.core.exceptions import HashTileError
from hashtile.core.splitter import ImageSplitter, SplitConfig
from hashtile.io.raster import load_raw_image
from hashtile.io.sinks import ArrowTileSink, GeoTiffTileSink
from hashtile.spatial.coverage import CoverageBoundary

logger = logging.getLogger(__name__)


def run_split(args: argparse.Namespace) -> int:
    """Run the split command"""
    image_path = Path(args.image)

    if not image_path.exists():
        print(f"Error: Image not found: {image_path}")
        return 1

    try:
        config = SplitConfig(
            precision=args.precision,
            min_coverage=args.min_coverage,
            boundary=CoverageBoundary.EXCLUSIVE if args.exclusive else CoverageBoundary.INCLUSIVE,
            max_workers=args.workers,
        )
        image = load_raw_image(str(image_path), timestamp=args.timestamp)
    except (HashTileError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if args.format == "tiff":
        sink = GeoTiffTileSink(args.output, nodata=image.nodata)
    else:
        sink = ArrowTileSink(args.output)

    print(f"Image: {image_path.resolve()}")
    print(f"  Size: {image.width} x {image.height} x {image.channel_count}")
    print(f"  Bounds: {image.geo_box.bounds}")
    print(f"  Timestamp: {image.timestamp}")
    print()

    try:
        stats = ImageSplitter(config).split_to(image, sink)
    except HashTileError as e:
        print(f"Error: {e}")
        return 1

    print(f"Cells evaluated: {stats.cells_evaluated:,}")
    print(f"Tiles written: {stats.tiles_emitted:,}")
    print(f"Skipped (coverage): {stats.skipped_coverage:,}")
    print(f"Skipped (degenerate): {stats.skipped_degenerate:,}")
    print(f"Output: {Path(args.output).resolve()}")
    return 0
