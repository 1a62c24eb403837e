"""
Image Splitting Pipeline

Cuts a RawImage into SpatiotemporalTiles along a geohash grid.

For each geohash cell intersecting the image footprint:
1. Compute the fraction of the cell the image covers
2. Skip the cell if coverage fails the threshold
3. Map the cell to a pixel rectangle (skip if it rounds to nothing)
4. Copy the pixels and emit a tile carrying the source timestamp

Tiles are produced lazily as the consumer pulls them.
"""

import dataclasses
import itertools
import logging
import math
import numbers
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Tuple

from hashtile.core.exceptions import ConfigError, DegenerateRegionError, SinkError
from hashtile.core.image import RawImage, SpatiotemporalTile
from hashtile.grid.base import CellGrid
from hashtile.grid.geohash import GeohashCell, GeohashGrid, validate_precision
from hashtile.spatial.coverage import CoverageBoundary, CoverageCalculator
from hashtile.spatial.mapper import PixelRect

if TYPE_CHECKING:
    from hashtile.io.sinks import TileSink

# Module-level logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitConfig:
    """
    Parameters of a split

    Attributes:
        precision: Geohash length (1-12)
        min_coverage: Minimum fraction of a cell the image must cover (0.0-1.0)
        boundary: Whether a coverage equal to min_coverage passes
        max_workers: Threads evaluating cells; None or 1 runs serially

    Examples:
        >>> SplitConfig(precision=6, min_coverage=0.5)
        SplitConfig(precision=6, min_coverage=0.5, boundary=<CoverageBoundary.INCLUSIVE: 'inclusive'>, max_workers=None)
    """

    precision: int = 5
    min_coverage: float = 1.0
    boundary: CoverageBoundary = CoverageBoundary.INCLUSIVE
    max_workers: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "precision", validate_precision(self.precision))

        if (
            isinstance(self.min_coverage, bool)
            or not isinstance(self.min_coverage, numbers.Real)
            or not math.isfinite(self.min_coverage)
        ):
            raise ConfigError(f"min_coverage must be a finite number, got {self.min_coverage!r}")
        object.__setattr__(self, "min_coverage", float(self.min_coverage))
        if not 0.0 <= self.min_coverage <= 1.0:
            raise ConfigError(f"min_coverage must be between 0.0 and 1.0, got {self.min_coverage}")

        try:
            object.__setattr__(self, "boundary", CoverageBoundary(self.boundary))
        except ValueError as e:
            raise ConfigError(f"Unknown coverage boundary: {self.boundary!r}") from e

        if self.max_workers is not None:
            if (
                isinstance(self.max_workers, bool)
                or not isinstance(self.max_workers, numbers.Integral)
                or self.max_workers < 1
            ):
                raise ConfigError(
                    f"max_workers must be a positive integer, got {self.max_workers!r}"
                )
            object.__setattr__(self, "max_workers", int(self.max_workers))

    def replace(self, **overrides: Any) -> "SplitConfig":
        """
        Copy with the given fields changed

        None means "keep the current value", so an override cannot reset
        max_workers to None; pass max_workers=1 to run serially instead.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self


class SplitState(str, Enum):
    """Progress of a TileCursor"""

    INITIALIZED = "initialized"
    ENUMERATING = "enumerating"
    EVALUATING = "evaluating"
    EXTRACTING = "extracting"
    SKIPPING = "skipping"
    DONE = "done"


@dataclass
class SplitStats:
    """Counters for one split"""

    cells_evaluated: int = 0
    tiles_emitted: int = 0
    skipped_coverage: int = 0
    skipped_degenerate: int = 0

    @property
    def cells_skipped(self) -> int:
        return self.skipped_coverage + self.skipped_degenerate

    def as_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)


# Per-cell outcomes
_EMIT = "emit"
_LOW_COVERAGE = "low_coverage"
_DEGENERATE = "degenerate"


class TileCursor:
    """
    Lazy, pull-based sequence of tiles from one split

    Nothing is evaluated until the first tile is requested. With
    max_workers > 1, cells are evaluated on a thread pool with a bounded
    look-ahead of 2 * max_workers cells; tiles are still yielded in grid
    order. Stop iterating (or call close()) to abandon remaining cells.

    Attributes:
        image: Source image
        precision: Geohash precision of the cells
        state: Current SplitState
        stats: SplitStats counters, updated as tiles are pulled

    Examples:
        >>> with ImageSplitter().split(image, precision=6) as cursor:
        ...     for tile in cursor:
        ...         print(tile.geohash_id, tile.coverage)
        >>> cursor.stats.tiles_emitted
        12
    """

    def __init__(
        self,
        image: RawImage,
        cells: Iterator[GeohashCell],
        calculator: CoverageCalculator,
        precision: int,
        max_workers: Optional[int] = None,
    ):
        self.image = image
        self.precision = precision
        self.state = SplitState.INITIALIZED
        self.stats = SplitStats()
        self._cells = cells
        self._calculator = calculator
        self._max_workers = max_workers
        self._mapper = image.mapper

        if max_workers is not None and max_workers > 1:
            self._tiles = self._generate_parallel(max_workers)
        else:
            self._tiles = self._generate()

    def __iter__(self) -> "TileCursor":
        return self

    def __next__(self) -> SpatiotemporalTile:
        return next(self._tiles)

    def close(self) -> None:
        """Abandon remaining cells"""
        self._tiles.close()
        self.state = SplitState.DONE

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    # -------------------------------------------------------------------------
    # Per-cell steps
    # -------------------------------------------------------------------------

    def _plan(self, cell: GeohashCell) -> Tuple[str, float, Optional[PixelRect]]:
        """Coverage and pixel rectangle for a cell, or the reason to skip it"""
        value, eligible = self._calculator.evaluate(cell)
        if not eligible:
            return _LOW_COVERAGE, value, None

        try:
            rect = self._mapper.to_pixel(cell.geo_box)
        except DegenerateRegionError as e:
            logger.debug("Skipping cell %s: %s", cell.id, e)
            return _DEGENERATE, value, None

        return _EMIT, value, rect

    def _extract(self, cell: GeohashCell, value: float, rect: PixelRect) -> SpatiotemporalTile:
        pixels = self.image.extract(rect)
        pixels.setflags(write=False)
        return SpatiotemporalTile(
            pixels=pixels,
            timestamp=self.image.timestamp,
            cell=cell,
            coverage=value,
            rect=rect,
            pixel_geo_box=self._mapper.to_geo(rect),
            valid_fraction=self.image.valid_fraction(pixels),
        )

    def _evaluate(self, cell: GeohashCell) -> Tuple[str, Optional[SpatiotemporalTile]]:
        """Plan and extract in one step (thread pool worker)"""
        outcome, value, rect = self._plan(cell)
        if outcome != _EMIT:
            return outcome, None
        return outcome, self._extract(cell, value, rect)

    def _record(self, outcome: str) -> None:
        self.stats.cells_evaluated += 1
        if outcome == _EMIT:
            self.stats.tiles_emitted += 1
        elif outcome == _LOW_COVERAGE:
            self.stats.skipped_coverage += 1
        else:
            self.stats.skipped_degenerate += 1

    # -------------------------------------------------------------------------
    # Generators
    # -------------------------------------------------------------------------

    def _generate(self) -> Iterator[SpatiotemporalTile]:
        self.state = SplitState.ENUMERATING

        for cell in self._cells:
            self.state = SplitState.EVALUATING
            outcome, value, rect = self._plan(cell)
            self._record(outcome)

            if outcome != _EMIT:
                self.state = SplitState.SKIPPING
                continue

            self.state = SplitState.EXTRACTING
            tile = self._extract(cell, value, rect)
            yield tile

        self.state = SplitState.DONE
        self._log_summary()

    def _generate_parallel(self, max_workers: int) -> Iterator[SpatiotemporalTile]:
        self.state = SplitState.ENUMERATING
        window = 2 * max_workers

        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hashtile")
        pending = deque()
        try:
            for cell in itertools.islice(self._cells, window):
                pending.append(executor.submit(self._evaluate, cell))

            while pending:
                self.state = SplitState.EVALUATING
                outcome, tile = pending.popleft().result()

                next_cell = next(self._cells, None)
                if next_cell is not None:
                    pending.append(executor.submit(self._evaluate, next_cell))

                self._record(outcome)
                if tile is None:
                    self.state = SplitState.SKIPPING
                    continue

                self.state = SplitState.EXTRACTING
                yield tile
        finally:
            for future in pending:
                future.cancel()
            executor.shutdown(wait=True, cancel_futures=True)

        self.state = SplitState.DONE
        self._log_summary()

    def _log_summary(self) -> None:
        logger.info(
            "Split %s at precision %d: %d cells, %d tiles, %d below coverage, %d degenerate",
            self.image.geo_box.bounds,
            self.precision,
            self.stats.cells_evaluated,
            self.stats.tiles_emitted,
            self.stats.skipped_coverage,
            self.stats.skipped_degenerate,
        )


class ImageSplitter:
    """
    Split images into geohash-aligned tiles

    Attributes:
        config: Default SplitConfig; per-call arguments override it
        grid: CellGrid used for cell enumeration (default: GeohashGrid)

    Examples:
        >>> splitter = ImageSplitter(SplitConfig(precision=5, min_coverage=1.0))
        >>> for tile in splitter.split(image):
        ...     sink.send(tile)
        >>>
        >>> # Keep partially covered cells too
        >>> tiles = list(splitter.split(image, min_coverage=0.25))
        >>>
        >>> # Drain straight into a sink
        >>> stats = splitter.split_to(image, ArrowTileSink("./tiles"))
    """

    def __init__(self, config: Optional[SplitConfig] = None, grid: Optional[CellGrid] = None):
        self.config = config or SplitConfig()
        self.grid = grid or GeohashGrid()

    def split(
        self,
        image: RawImage,
        precision: Optional[int] = None,
        min_coverage: Optional[float] = None,
        boundary: Optional[CoverageBoundary] = None,
        max_workers: Optional[int] = None,
    ) -> TileCursor:
        """
        Lazily split an image along the geohash grid

        Arguments are validated here, before any cell is evaluated.

        Args:
            image: Source image
            precision: Geohash length (1-12)
            min_coverage: Minimum fraction of a cell the image must cover
            boundary: Whether coverage equal to min_coverage passes
            max_workers: Threads evaluating cells (None keeps the configured
                value; 1 runs serially)

        Returns:
            TileCursor yielding SpatiotemporalTile in grid order

        Raises:
            InvalidPrecisionError: If precision is outside 1..12
            ConfigError: If min_coverage, boundary or max_workers is invalid
        """
        config = self.config.replace(
            precision=precision,
            min_coverage=min_coverage,
            boundary=boundary,
            max_workers=max_workers,
        )

        cells = self.grid.cells_for(image.geo_box, config.precision)
        calculator = CoverageCalculator(image.geo_box, config.min_coverage, config.boundary)

        logger.debug("Splitting %r with %s", image, config)
        return TileCursor(
            image,
            cells,
            calculator,
            precision=config.precision,
            max_workers=config.max_workers,
        )

    def split_to(self, image: RawImage, sink: "TileSink", **overrides: Any) -> SplitStats:
        """
        Split an image and hand every tile to a sink

        Args:
            image: Source image
            sink: Receiver of tiles
            **overrides: Same keyword arguments as split()

        Returns:
            SplitStats of the run

        Raises:
            SinkError: If the sink fails to accept a tile
        """
        with self.split(image, **overrides) as cursor:
            for tile in cursor:
                try:
                    sink.send(tile)
                except SinkError:
                    raise
                except Exception as e:
                    raise SinkError(f"Sink failed on tile {tile.geohash_id}: {e}") from e
            stats = cursor.stats

        return stats


def split(
    image: RawImage,
    precision: int,
    min_coverage: float = 1.0,
    boundary: CoverageBoundary = CoverageBoundary.INCLUSIVE,
    max_workers: Optional[int] = None,
) -> TileCursor:
    """
    Split an image with a one-off configuration

    Examples:
        >>> tiles = list(split(image, precision=3))
    """
    config = SplitConfig(
        precision=precision,
        min_coverage=min_coverage,
        boundary=boundary,
        max_workers=max_workers,
    )
    return ImageSplitter(config).split(image)
