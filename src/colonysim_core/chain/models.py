# src/colonysim_core/chain/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..reference.records import ResourceLevel


@dataclass(frozen=True)
class ResourceChainInfo:
    """
    One resource in a production chain, with its direct recipe inputs, the planet
    types that can yield it, and whether those planet types exist in the candidate
    systems.

    `can_produce` only describes this resource's own planet types. It says nothing
    about whether its inputs are available; callers that need a chain-wide answer
    must combine the entries themselves.
    """
    resource_id: int
    resource_name: str
    icon_file_name: str
    resource_level: ResourceLevel
    required_resources: Tuple[int, ...] = ()
    required_planet_types: Tuple[int, ...] = ()
    planet_type_names: Tuple[str, ...] = ()
    can_produce: bool = False
    available_planet_types: Tuple[int, ...] = ()
    all_required_planet_types_available: bool = False
    some_required_planet_types_available: bool = False


@dataclass(frozen=True)
class ResourceDemand:
    """Units of a resource needed to make one unit of every top-tier product in a chain."""
    resource_id: int
    resource_name: str
    icon_file_name: str
    quantity: float


def group_by_level(chain: Iterable[ResourceChainInfo]) -> Dict[ResourceLevel, List[ResourceChainInfo]]:
    """Groups chain entries by tier, keeping chain order within each tier."""
    groups: Dict[ResourceLevel, List[ResourceChainInfo]] = {}
    for entry in chain:
        groups.setdefault(entry.resource_level, []).append(entry)
    return groups
