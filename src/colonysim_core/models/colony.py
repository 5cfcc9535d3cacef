# src/colonysim_core/models/colony.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set, Tuple

from .entities import Pin, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """A directed transfer of `quantity` units of `type` per cycle between two pins of one colony."""
    type: Type
    source_pin_id: int
    destination_pin_id: int
    quantity: int
    route_id: int
    waypoints: Tuple[int, ...] = ()


@dataclass(frozen=True)
class PlanetaryLink:
    source_pin_id: int
    destination_pin_id: int
    link_level: int = 0


@dataclass(frozen=True)
class SolarSystem:
    id: int
    name: str


class ColonyStatusKind(Enum):
    """
    Aggregate colony states. Each member's value is a tuple: (order, is_working),
    where `order` is the fixed sort priority (most urgent first).
    """
    NOT_SETUP = (1, False)
    NEEDS_ATTENTION = (2, False)
    IDLE = (3, False)
    PRODUCING = (4, True)
    EXTRACTING = (5, True)

    @property
    def order(self) -> int:
        return self.value[0]

    @property
    def is_working(self) -> bool:
        return self.value[1]


@dataclass(frozen=True)
class ColonyStatus:
    """The aggregate status of a colony together with the pins that decided it."""
    kind: ColonyStatusKind
    pins: Tuple[Pin, ...] = ()

    @property
    def order(self) -> int:
        return self.kind.order

    @property
    def is_working(self) -> bool:
        return self.kind.is_working

    def __str__(self) -> str:
        return f"{self.kind.name.lower()}({len(self.pins)} pins)"


@dataclass(frozen=True)
class ColonyOverview:
    """Final products of a colony and how full its launchpads are."""
    final_products: Set[Type]
    capacity: int
    other_used_capacity: float
    final_products_used_capacity: float


@dataclass
class Colony:
    """
    The facility and route graph of one character's planet, as of one snapshot.

    Built once per refresh by the ColonyConverter. `clone()` yields an independent
    working copy whose pins can be edited without touching this one.
    """
    id: str
    checkpoint_sim_time: datetime
    current_sim_time: datetime
    character_id: int
    system: SolarSystem
    upgrade_level: int
    links: List[PlanetaryLink]
    pins: List[Pin]
    routes: List[Route]
    status: ColonyStatus
    overview: ColonyOverview
    planet_id: Optional[int] = None
    planet_name: str = ""
    planet_type: str = ""

    def get_pin(self, pin_id: int) -> Optional[Pin]:
        return next((pin for pin in self.pins if pin.id == pin_id), None)

    def clone(self) -> Colony:
        return replace(
            self,
            links=list(self.links),
            pins=[pin.clone() for pin in self.pins],
            routes=list(self.routes),
        )
