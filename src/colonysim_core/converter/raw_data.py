# src/colonysim_core/converter/raw_data.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

# Intermediate representation of one planet-detail snapshot, as validated by the
# SnapshotParser. The ColonyConverter consumes only these types, never raw dicts.
# Timestamps are kept as delivered (ISO-8601 text, or a datetime when the source
# was YAML) and are interpreted by the converter.

RawTimestamp = Union[str, datetime]


@dataclass(frozen=True)
class ParsedContent:
    type_id: int
    amount: int


@dataclass(frozen=True)
class ParsedExtractorHead:
    head_id: int
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ParsedExtractorDetails:
    """Extractor program settings. All fields are absent when no program is installed."""
    cycle_time: Optional[int] = None
    head_radius: Optional[float] = None
    heads: Tuple[ParsedExtractorHead, ...] = ()
    product_type_id: Optional[int] = None
    qty_per_cycle: Optional[int] = None


@dataclass(frozen=True)
class ParsedFactoryDetails:
    schematic_id: int


@dataclass(frozen=True)
class ParsedPin:
    pin_id: int
    type_id: int
    latitude: float
    longitude: float
    contents: Tuple[ParsedContent, ...] = ()
    install_time: Optional[RawTimestamp] = None
    expiry_time: Optional[RawTimestamp] = None
    last_cycle_start: Optional[RawTimestamp] = None
    schematic_id: Optional[int] = None
    extractor_details: Optional[ParsedExtractorDetails] = None
    factory_details: Optional[ParsedFactoryDetails] = None


@dataclass(frozen=True)
class ParsedRoute:
    route_id: int
    source_pin_id: int
    destination_pin_id: int
    content_type_id: int
    quantity: float
    waypoints: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ParsedLink:
    source_pin_id: int
    destination_pin_id: int
    link_level: int = 0


@dataclass(frozen=True)
class ParsedPlanetDetail:
    """Top-level IR node for one planet's facilities, links and routes."""
    pins: Tuple[ParsedPin, ...]
    links: Tuple[ParsedLink, ...] = ()
    routes: Tuple[ParsedRoute, ...] = ()
    source_path: Optional[Path] = None
