"""
hashtile Exceptions

Exception hierarchy for error handling.
"""


class HashTileError(Exception):
    """Base exception for hashtile"""

    pass


class InvalidBoundsError(HashTileError, ValueError):
    """Geographic bounding box violates its invariants"""

    pass


class InvalidPrecisionError(HashTileError, ValueError):
    """Geohash precision outside the supported 1..12 range"""

    pass


class InvalidGeohashError(HashTileError, ValueError):
    """Geohash string is empty or contains characters outside the base32 alphabet"""

    pass


class DegenerateRegionError(HashTileError):
    """Geographic region maps to an empty pixel rectangle"""

    pass


class BufferMismatchError(HashTileError, ValueError):
    """Raster buffer length inconsistent with declared dimensions"""

    pass


class ConfigError(HashTileError, ValueError):
    """Split configuration is invalid"""

    pass


class SinkError(HashTileError):
    """Tile sink failed to accept a tile"""

    pass
