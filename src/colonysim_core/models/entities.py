# src/colonysim_core/models/entities.py
# Required for forward references in type hints.
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Type:
    """
    An item type as far as the colony model cares: its id, display name and unit
    volume. Two Type objects are the same type iff their ids match.
    """
    id: int
    name: str
    volume: float

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Type):
            return NotImplemented
        return self.id == other.id


@dataclass(frozen=True)
class Schematic:
    """One factory recipe: `inputs` are consumed per cycle to make `output_quantity` of `output_type`."""
    id: int
    cycle_time: timedelta
    output_type: Type
    output_quantity: int
    inputs: Dict[Type, int]


class PinStatus(Enum):
    """Operational status of a single facility. Terminal tags; no transitions are stored."""
    EXTRACTING = "extracting"
    PRODUCING = "producing"
    NOT_SETUP = "not_setup"
    INPUT_NOT_ROUTED = "input_not_routed"
    OUTPUT_NOT_ROUTED = "output_not_routed"
    EXTRACTOR_EXPIRED = "extractor_expired"
    EXTRACTOR_INACTIVE = "extractor_inactive"
    STORAGE_FULL = "storage_full"
    FACTORY_IDLE = "factory_idle"
    STATIC = "static"

    def __str__(self):
        return self.value


class RoutedState(Enum):
    ROUTED = "routed"
    INPUT_NOT_ROUTED = "input_not_routed"
    OUTPUT_NOT_ROUTED = "output_not_routed"


class PinKind(Enum):
    """The operational variant of a pin; selects the payload carried in `Pin.details`."""
    EXTRACTOR = "extractor"
    FACTORY = "factory"
    STORAGE = "storage"
    LAUNCHPAD = "launchpad"
    COMMAND_CENTER = "command_center"
    OTHER = "other"


@dataclass(frozen=True)
class ExtractorHead:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class ExtractorDetails:
    expiry_time: Optional[datetime] = None
    install_time: Optional[datetime] = None
    cycle_time: Optional[timedelta] = None
    head_radius: Optional[float] = None
    heads: Tuple[ExtractorHead, ...] = ()
    product_type: Optional[Type] = None
    base_value: Optional[int] = None

    @property
    def is_setup(self) -> bool:
        return (
            self.install_time is not None
            and self.expiry_time is not None
            and self.cycle_time is not None
            and self.base_value is not None
            and self.product_type is not None
        )


@dataclass
class FactoryDetails:
    schematic: Optional[Schematic] = None
    has_received_inputs: bool = False
    received_inputs_last_cycle: bool = False
    last_cycle_start_time: Optional[datetime] = None


@dataclass(frozen=True)
class CommandCenterDetails:
    level: int = 0


PinDetails = Union[ExtractorDetails, FactoryDetails, CommandCenterDetails]


@dataclass
class Pin:
    """
    A facility placed on a planet.

    All variants share this record; `kind` says which variant it is and `details`
    carries the variant payload (None for storage, launchpads and unknown facilities,
    and for extractors whose snapshot had no extractor sub-details).

    `capacity_used` is derived from `contents` when the pin is built and is not kept
    in sync with later edits to `contents`.
    """
    id: int
    type: Type
    name: str
    designator: str
    kind: PinKind
    latitude: float
    longitude: float
    contents: Dict[Type, int] = field(default_factory=dict)
    capacity_used: Optional[float] = None
    is_active: bool = True
    status: PinStatus = PinStatus.STATIC
    last_run_time: Optional[datetime] = None
    details: Optional[PinDetails] = None

    def __post_init__(self):
        if self.capacity_used is None:
            self.capacity_used = self.capacity_of(self.contents)

    @staticmethod
    def capacity_of(contents: Dict[Type, int]) -> float:
        return sum(item_type.volume * quantity for item_type, quantity in contents.items())

    @property
    def extractor(self) -> Optional[ExtractorDetails]:
        return self.details if isinstance(self.details, ExtractorDetails) else None

    @property
    def factory(self) -> Optional[FactoryDetails]:
        return self.details if isinstance(self.details, FactoryDetails) else None

    @property
    def schematic(self) -> Optional[Schematic]:
        factory = self.factory
        return factory.schematic if factory else None

    @property
    def level(self) -> Optional[int]:
        return self.details.level if isinstance(self.details, CommandCenterDetails) else None

    def has_enough_inputs(self) -> bool:
        """True if the contents hold at least one full cycle of every schematic input."""
        schematic = self.schematic
        if schematic is None:
            return False
        return all(self.contents.get(input_type, 0) >= quantity for input_type, quantity in schematic.inputs.items())

    def input_buffer_state(self) -> float:
        """
        How empty the factory's input buffer is: 0.0 when every input is stocked to
        exactly one cycle, 1.0 when nothing is stocked. Pins without inputs report 0.0.
        """
        schematic = self.schematic
        if schematic is None or not schematic.inputs:
            return 0.0
        products_ratio = sum(
            self.contents.get(input_type, 0) / quantity for input_type, quantity in schematic.inputs.items()
        )
        return 1.0 - products_ratio / len(schematic.inputs)

    def clone(self) -> Pin:
        """An independent copy: contents and mutable payloads are copied, types are shared."""
        return replace(
            self,
            contents=dict(self.contents),
            details=copy.copy(self.details),
        )
