# src/colonysim_core/converter/__init__.py
"""
Exposes the public interface of the snapshot conversion package.
"""
from .raw_data import (
    ParsedContent,
    ParsedExtractorHead,
    ParsedExtractorDetails,
    ParsedFactoryDetails,
    ParsedPin,
    ParsedRoute,
    ParsedLink,
    ParsedPlanetDetail,
)
from .exceptions import SnapshotParsingError, SnapshotSchemaError
from .snapshot_parser import SnapshotParser
from .converter import ColonyConverter, parse_timestamp

__all__ = [
    "ParsedContent",
    "ParsedExtractorHead",
    "ParsedExtractorDetails",
    "ParsedFactoryDetails",
    "ParsedPin",
    "ParsedRoute",
    "ParsedLink",
    "ParsedPlanetDetail",
    "SnapshotParsingError",
    "SnapshotSchemaError",
    "SnapshotParser",
    "ColonyConverter",
    "parse_timestamp",
]
