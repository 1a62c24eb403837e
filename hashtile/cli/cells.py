"""
Cells CLI command

Lists the geohash cells intersecting a bounding box.
"""

import argparse

from hashtile.core.exceptions import HashTileError
from hashtile.core.geobox import GeoBox
from hashtile.grid.geohash import GeohashGrid, cell_dimensions


def run_cells(args: argparse.Namespace) -> int:
    """Run the cells command"""
    try:
        box = GeoBox(args.min_lat, args.max_lat, args.min_lon, args.max_lon)
        cells = GeohashGrid().cells_for(box, args.precision)
        lat_dim, lon_dim = cell_dimensions(args.precision)
    except HashTileError as e:
        print(f"Error: {e}")
        return 1

    print(f"Precision {args.precision}: cells are {lat_dim:g} x {lon_dim:g} degrees (lat x lon)")

    count = 0
    for cell in cells:
        minx, miny, maxx, maxy = cell.geo_box.bounds
        print(f"  {cell.id}  lat [{miny:g}, {maxy:g}]  lon [{minx:g}, {maxx:g}]")
        count += 1

    print(f"Total: {count:,} cells")
    return 0
