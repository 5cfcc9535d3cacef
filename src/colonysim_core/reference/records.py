# src/colonysim_core/reference/records.py
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from ..constants import PI_MARKET_GROUP_IDS

# Immutable records handed out by the ReferenceCache. They are shared between
# threads once the cache is loaded, so none of them may be mutable.


class ResourceLevel(IntEnum):
    """Production tier of a PI resource. P0 is raw-extracted, P4 the most refined."""
    P0 = 0
    P1 = 1
    P2 = 2
    P3 = 3
    P4 = 4

    @property
    def market_group_id(self) -> int:
        return PI_MARKET_GROUP_IDS[self.value]

    @property
    def level_name(self) -> str:
        return f"P{self.value}"

    @classmethod
    def from_market_group(cls, market_group_id: Optional[int]) -> Optional[ResourceLevel]:
        """Classifies a market group id into a tier, or None for non-PI groups."""
        if market_group_id in PI_MARKET_GROUP_IDS:
            return cls(PI_MARKET_GROUP_IDS.index(market_group_id))
        return None


@dataclass(frozen=True)
class ResourceInfo:
    name: str
    icon_file_name: str
    market_group_id: int


@dataclass(frozen=True)
class TypeInfo:
    name: str
    volume: float
    group_id: Optional[int] = None


@dataclass(frozen=True)
class SystemInfo:
    name: str
    security: float
    region: str


@dataclass(frozen=True)
class SchematicRecord:
    """
    One row of `planetSchematics` with its comma-delimited input lists already
    split into two parallel tuples of equal length.
    """
    schematic_id: int
    output_type_id: int
    name: str
    cycle_time: int
    output_value: int
    input_type_ids: Tuple[int, ...]
    input_values: Tuple[int, ...]

    def input_value_for(self, type_id: int) -> Optional[int]:
        """Quantity of `type_id` consumed per cycle, or None if it is not an input."""
        try:
            return self.input_values[self.input_type_ids.index(type_id)]
        except ValueError:
            return None
