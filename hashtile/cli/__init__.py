"""
hashtile CLI Entry Points

Provides command-line interface for:
- split: Split a GeoTIFF into geohash tiles
- cells: List geohash cells covering a bounding box
- info: Show the contents of a tile file
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="hashtile - Split georeferenced images along a geohash grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hashtile split scene.tif --precision 5 --output ./tiles      Split fully covered cells
  hashtile split scene.tif -p 6 --min-coverage 0.5 -o ./tiles   Keep half-covered cells
  hashtile cells 37.0 38.0 127.0 128.0 --precision 3           List cells over a box
  hashtile info ./tiles/wydm9/1718409600000.arrow              Show a tile file
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Split command
    split_parser = subparsers.add_parser("split", help="Split a GeoTIFF into geohash tiles")
    split_parser.add_argument("image", help="Path to a GeoTIFF in EPSG:4326")
    split_parser.add_argument(
        "--precision", "-p", type=int, default=5, help="Geohash precision 1-12 (default: 5)"
    )
    split_parser.add_argument(
        "--min-coverage",
        type=float,
        default=1.0,
        help="Minimum fraction of a cell the image must cover (default: 1.0)",
    )
    split_parser.add_argument(
        "--exclusive",
        action="store_true",
        help="Require coverage strictly greater than --min-coverage",
    )
    split_parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Capture time in epoch milliseconds (default: TIFF DateTime tag)",
    )
    split_parser.add_argument("--output", "-o", required=True, help="Output directory")
    split_parser.add_argument(
        "--format", choices=["arrow", "tiff"], default="arrow", help="Tile format (default: arrow)"
    )
    split_parser.add_argument(
        "--workers", type=int, default=None, help="Threads evaluating cells (default: serial)"
    )

    # Cells command
    cells_parser = subparsers.add_parser("cells", help="List geohash cells covering a box")
    cells_parser.add_argument("min_lat", type=float, help="Southern edge")
    cells_parser.add_argument("max_lat", type=float, help="Northern edge")
    cells_parser.add_argument("min_lon", type=float, help="Western edge")
    cells_parser.add_argument("max_lon", type=float, help="Eastern edge")
    cells_parser.add_argument(
        "--precision", "-p", type=int, default=5, help="Geohash precision 1-12 (default: 5)"
    )

    # Info command
    info_parser = subparsers.add_parser("info", help="Show the contents of a tile file")
    info_parser.add_argument("tile", help="Path to an .arrow tile file")

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(message)s" if not args.verbose else "%(levelname)s: %(message)s"
    )

    if args.command == "split":
        from hashtile.cli.split import run_split

        return run_split(args)
    elif args.command == "cells":
        from hashtile.cli.cells import run_cells

        return run_cells(args)
    elif args.command == "info":
        from hashtile.cli.info import run_info

        return run_info(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
