# src/colonysim_core/status/engine.py
"""
Pure status derivation for pins and colonies.

Every function here is a function of its arguments only: a pin, the colony's
routes and a reference time. Nothing is cached and nothing is mutated, so the
same snapshot always produces the same statuses.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..constants import COMMAND_CENTER_CAPACITY, LAUNCHPAD_CAPACITY, STORAGE_CAPACITY
from ..models.colony import ColonyStatus, ColonyStatusKind, Route
from ..models.entities import Pin, PinKind, PinStatus, RoutedState

logger = logging.getLogger(__name__)

NOT_SETUP_STATUSES = frozenset({
    PinStatus.NOT_SETUP,
    PinStatus.INPUT_NOT_ROUTED,
    PinStatus.OUTPUT_NOT_ROUTED,
})

NEEDS_ATTENTION_STATUSES = frozenset({
    PinStatus.EXTRACTOR_EXPIRED,
    PinStatus.EXTRACTOR_INACTIVE,
    PinStatus.STORAGE_FULL,
})

_CAPACITY_BY_KIND = {
    PinKind.STORAGE: STORAGE_CAPACITY,
    PinKind.COMMAND_CENTER: COMMAND_CENTER_CAPACITY,
    PinKind.LAUNCHPAD: LAUNCHPAD_CAPACITY,
}

_ROUTING_FAILURE_STATUS = {
    RoutedState.INPUT_NOT_ROUTED: PinStatus.INPUT_NOT_ROUTED,
    RoutedState.OUTPUT_NOT_ROUTED: PinStatus.OUTPUT_NOT_ROUTED,
}


def get_capacity(pin: Pin) -> Optional[int]:
    """Storage capacity of a pin in m3, or None for pins without a bounded store."""
    return _CAPACITY_BY_KIND.get(pin.kind)


def is_routed(pin: Pin, routes: Iterable[Route]) -> RoutedState:
    """
    Checks the routing of a pin.

    Inputs are checked for factories only: every schematic input type must arrive
    over at least one route. Outputs are checked for factories and extractors: at
    least one route must leave the pin. An input failure is reported before an
    output failure.
    """
    routes = list(routes)

    if pin.kind is PinKind.FACTORY and pin.schematic is not None:
        routed_input_types = {route.type for route in routes if route.destination_pin_id == pin.id}
        if any(input_type not in routed_input_types for input_type in pin.schematic.inputs):
            return RoutedState.INPUT_NOT_ROUTED

    if pin.kind in (PinKind.FACTORY, PinKind.EXTRACTOR):
        if not any(route.source_pin_id == pin.id for route in routes):
            return RoutedState.OUTPUT_NOT_ROUTED

    return RoutedState.ROUTED


def _extractor_status(pin: Pin, now: datetime, routes: List[Route]) -> PinStatus:
    details = pin.extractor
    if details is None or not details.is_setup:
        return PinStatus.NOT_SETUP
    if details.expiry_time <= now:
        return PinStatus.EXTRACTOR_EXPIRED

    routed = is_routed(pin, routes)
    if routed is not RoutedState.ROUTED:
        return _ROUTING_FAILURE_STATUS[routed]

    return PinStatus.EXTRACTING if pin.is_active else PinStatus.EXTRACTOR_INACTIVE


def _factory_status(pin: Pin, routes: List[Route]) -> PinStatus:
    factory = pin.factory
    if factory is None or factory.schematic is None:
        return PinStatus.NOT_SETUP

    routed = is_routed(pin, routes)
    if routed is not RoutedState.ROUTED:
        return _ROUTING_FAILURE_STATUS[routed]

    if factory.last_cycle_start_time is not None or pin.is_active:
        return PinStatus.PRODUCING
    return PinStatus.FACTORY_IDLE


def _storage_status(pin: Pin, routes: List[Route]) -> PinStatus:
    incoming = [route for route in routes if route.destination_pin_id == pin.id]
    if not incoming:
        return PinStatus.STATIC

    capacity = get_capacity(pin)
    remaining = max(capacity - pin.capacity_used, 0)
    if any(route.type.volume * route.quantity > remaining for route in incoming):
        return PinStatus.STORAGE_FULL
    return PinStatus.STATIC


def get_pin_status(pin: Pin, now: datetime, routes: Iterable[Route]) -> PinStatus:
    """Derives the operational status of `pin` at time `now` given the colony's routes."""
    routes = list(routes)
    if pin.kind is PinKind.EXTRACTOR:
        return _extractor_status(pin, now, routes)
    if pin.kind is PinKind.FACTORY:
        return _factory_status(pin, routes)
    if pin.kind in _CAPACITY_BY_KIND:
        return _storage_status(pin, routes)
    return PinStatus.STATIC


def get_colony_status(pins: Sequence[Pin]) -> ColonyStatus:
    """
    Aggregates pin statuses into one colony status.

    The checks run in strict priority order, each over the full pin list, and the
    first one that matches wins. When nothing matches the colony is idle; the idle
    status always carries an empty pin list.
    """
    not_setup = [pin for pin in pins if pin.status in NOT_SETUP_STATUSES]
    if not_setup:
        return ColonyStatus(ColonyStatusKind.NOT_SETUP, tuple(not_setup))

    needs_attention = [pin for pin in pins if pin.status in NEEDS_ATTENTION_STATUSES]
    if needs_attention:
        return ColonyStatus(ColonyStatusKind.NEEDS_ATTENTION, tuple(needs_attention))

    extracting = [pin for pin in pins if pin.status is PinStatus.EXTRACTING]
    if extracting:
        return ColonyStatus(ColonyStatusKind.EXTRACTING, tuple(extracting))

    producing = [pin for pin in pins if pin.status is PinStatus.PRODUCING]
    if producing:
        return ColonyStatus(ColonyStatusKind.PRODUCING, tuple(producing))

    return ColonyStatus(ColonyStatusKind.IDLE, ())
