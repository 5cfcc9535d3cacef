# src/colonysim_core/status/overview.py
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional, Sequence

from ..constants import (
    COMMAND_CENTER_GROUP_ID,
    EXTRACTOR_CONTROL_GROUP_ID,
    PROCESSOR_GROUP_ID,
    SPACEPORT_GROUP_ID,
    STORAGE_GROUP_ID,
)
from ..models.colony import ColonyOverview, Route
from ..models.entities import Pin, PinKind, Type
from .engine import get_capacity

logger = logging.getLogger(__name__)


def final_product_quantities(routes: Iterable[Route], pins: Sequence[Pin]) -> Dict[Type, int]:
    """Output quantity per cycle of every factory product that is not routed onwards, summed per type."""
    source_pin_ids = {route.source_pin_id for route in routes}
    quantities: Dict[Type, int] = {}
    for pin in pins:
        schematic = pin.schematic
        if pin.kind is not PinKind.FACTORY or schematic is None or pin.id in source_pin_ids:
            continue
        output_type = schematic.output_type
        quantities[output_type] = quantities.get(output_type, 0) + schematic.output_quantity
    return quantities


def get_colony_overview(routes: Iterable[Route], pins: Sequence[Pin]) -> ColonyOverview:
    """Final products of the colony and how its launchpad storage is split between them and everything else."""
    final_products = set(final_product_quantities(routes, pins))

    capacity = 0
    final_products_used = 0.0
    other_used = 0.0
    for pin in pins:
        if pin.kind is not PinKind.LAUNCHPAD:
            continue
        capacity += get_capacity(pin) or 0
        for content_type, quantity in pin.contents.items():
            volume_used = content_type.volume * quantity
            if content_type in final_products:
                final_products_used += volume_used
            else:
                other_used += volume_used

    return ColonyOverview(
        final_products=final_products,
        capacity=capacity,
        other_used_capacity=other_used,
        final_products_used_capacity=final_products_used,
    )


@dataclass(frozen=True)
class ExtractorSummary:
    total_count: int
    expired_count: int
    expiring_soon_count: int
    earliest_expiry: Optional[datetime] = None


def summarize_extractors(
    pins: Iterable[Pin],
    now: datetime,
    expiring_window: timedelta = timedelta(hours=1),
) -> ExtractorSummary:
    """
    Counts extractor programs by expiry. Expired extractors are also counted as
    expiring soon. The earliest expiry only considers programs still running.
    """
    total = expired = expiring_soon = 0
    earliest: Optional[datetime] = None
    soon_threshold = now + expiring_window

    for pin in pins:
        if pin.kind is not PinKind.EXTRACTOR:
            continue
        total += 1
        details = pin.extractor
        expiry = details.expiry_time if details else None
        if expiry is None:
            continue
        if expiry <= now:
            expired += 1
        else:
            earliest = expiry if earliest is None else min(earliest, expiry)
        if expiry <= soon_threshold:
            expiring_soon += 1

    return ExtractorSummary(
        total_count=total,
        expired_count=expired,
        expiring_soon_count=expiring_soon,
        earliest_expiry=earliest,
    )


def facility_icon_name(group_id: int, en_name: Optional[str] = None) -> str:
    """Icon asset name for a facility group. Processors pick their tier from the English type name."""
    if group_id == COMMAND_CENTER_GROUP_ID:
        return "command"
    if group_id == PROCESSOR_GROUP_ID:
        if en_name and " Advanced " in en_name:
            return "processadvanced"
        if en_name and " High-Tech " in en_name:
            return "processhightech"
        return "process"
    if group_id == STORAGE_GROUP_ID:
        return "storage"
    if group_id == SPACEPORT_GROUP_ID:
        return "spaceport"
    if group_id == EXTRACTOR_CONTROL_GROUP_ID:
        return "extractor"
    return ""
