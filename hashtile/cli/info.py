"""
Info CLI command

Shows the metadata of a tile written by the Arrow tile sink.
"""

import argparse
from pathlib import Path

from hashtile.io.sinks import read_tile


def run_info(args: argparse.Namespace) -> int:
    """Run the info command"""
    tile_path = Path(args.tile)

    if not tile_path.exists():
        print(f"Error: Tile not found: {tile_path}")
        return 1

    try:
        tile = read_tile(tile_path)
    except ValueError as e:
        print(f"Error reading tile: {e}")
        return 1

    print(f"Tile: {tile_path.resolve()}")
    print()
    for key, value in tile.metadata().items():
        print(f"  {key}: {value}")
    return 0
