"""
Cell Grid Protocol

Hierarchical geographic grid used to partition images into tiles.
"""

from typing import Iterator, Protocol

from hashtile.core.geobox import GeoBox


class CellGrid(Protocol):
    """
    Geographic grid whose cells are identified by a string code

    The grid is regular in latitude/longitude at a given precision:
    every cell at one precision has the same size in degrees, and each
    additional precision level subdivides the parent cell.
    """

    def cells_for(self, box: GeoBox, precision: int) -> Iterator:
        """
        Enumerate every cell at a precision that intersects a box

        Args:
            box: Region of interest
            precision: Code length

        Returns:
            Lazy iterator of cells in deterministic order
        """
        ...

    def cell_for_point(self, lat: float, lon: float, precision: int):
        """
        Cell containing a point

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            precision: Code length

        Returns:
            The cell whose box contains the point
        """
        ...

    def cell_box(self, cell_id: str) -> GeoBox:
        """
        Geographic bounds of a cell identifier

        Args:
            cell_id: Cell code (e.g., "wydm9")

        Returns:
            The cell's bounding box
        """
        ...
