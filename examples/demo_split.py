"""
hashtile Time-Series Demo

Splits a directory of GeoTIFF scenes into geohash tiles and prints, per
geohash cell, the capture times that landed in it.

Prerequisites:
- GeoTIFF files in EPSG:4326
- Capture time in the TIFFTAG_DATETIME tag, or a YYYYMMDD date in the file name

Usage:
    python examples/demo_split.py --image-dir ./scenes --output ./tiles --precision 6
"""

import argparse
import re
import sys
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from hashtile import ArrowTileSink, ImageSplitter, SplitConfig, load_raw_image, read_tile
from hashtile.io.raster import RasterReader


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="hashtile Time-Series Demo")
    parser.add_argument(
        "--image-dir", type=str, required=True, help="Directory containing GeoTIFF files"
    )
    parser.add_argument(
        "--output", type=str, default="./tiles", help="Tile directory (default: ./tiles)"
    )
    parser.add_argument(
        "--precision", type=int, default=6, help="Geohash precision (default: 6)"
    )
    parser.add_argument(
        "--min-coverage",
        type=float,
        default=1.0,
        help="Minimum fraction of a cell an image must cover (default: 1.0)",
    )
    parser.add_argument(
        "--limit", type=int, default=None, help="Limit number of files to split (for testing)"
    )
    return parser.parse_args()


def extract_capture_time(image_path: Path) -> Optional[int]:
    """
    Capture time in epoch milliseconds

    Priority:
    1. TIFFTAG_DATETIME from metadata
    2. Parse from filename (YYYYMMDD pattern)
    """
    with RasterReader(str(image_path)) as reader:
        timestamp = reader.get_timestamp()
    if timestamp is not None:
        return timestamp

    # e.g., S2A_20240115.tif
    date_match = re.search(r"(\d{8})", image_path.name)
    if date_match:
        try:
            captured = datetime.strptime(date_match.group(1), "%Y%m%d")
        except ValueError:
            return None
        return int(captured.replace(tzinfo=timezone.utc).timestamp() * 1000)

    return None


def find_images(image_dir: str, limit: Optional[int] = None) -> List[Tuple[Path, int]]:
    """
    Find GeoTIFF files and their capture times, sorted by time

    Files without a capture time are skipped.
    """
    image_dir_path = Path(image_dir)
    if not image_dir_path.exists():
        raise FileNotFoundError(f"Image directory not found: {image_dir}")

    images = []
    for pattern in ("**/*.tif", "**/*.tiff"):
        for path in sorted(image_dir_path.glob(pattern)):
            timestamp = extract_capture_time(path)
            if timestamp is None:
                print(f"  Skipping {path.name}: no capture time")
                continue
            images.append((path, timestamp))

    images.sort(key=lambda item: item[1])
    if limit and len(images) > limit:
        print(f"  (Limiting to first {limit} files)")
        images = images[:limit]
    return images


def main():
    args = parse_args()

    print("=" * 60)
    print("hashtile Time-Series Demo")
    print("=" * 60)

    images = find_images(args.image_dir, args.limit)
    if not images:
        print("No images found")
        return 1

    splitter = ImageSplitter(SplitConfig(precision=args.precision, min_coverage=args.min_coverage))
    sink = ArrowTileSink(args.output)

    for path, timestamp in images:
        image = load_raw_image(str(path), timestamp=timestamp)
        stats = splitter.split_to(image, sink)
        print(f"  {path.name}: {stats.tiles_emitted} tiles ({stats.cells_skipped} cells skipped)")

    series = defaultdict(list)
    for tile_path in sink.written:
        tile = read_tile(tile_path)
        series[tile.geohash_id].append((tile.timestamp, tile.valid_fraction))

    print()
    print(f"{len(series)} cells with tiles:")
    for geohash_id in sorted(series):
        print(f"  {geohash_id}")
        for timestamp, valid in sorted(series[geohash_id]):
            captured = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
            print(f"    {captured:%Y-%m-%d %H:%M}  valid {valid:.1%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
