# src/colonysim_core/converter/converter.py
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Union

from ..constants import (
    COMMAND_CENTER_GROUP_ID,
    EXTRACTOR_CONTROL_GROUP_ID,
    PROCESSOR_GROUP_ID,
    SPACEPORT_GROUP_ID,
    STORAGE_GROUP_ID,
    UNKNOWN_TYPE_NAME,
    UNKNOWN_TYPE_VOLUME,
)
from ..errors import ColonyConversionError
from ..models.colony import Colony, PlanetaryLink, Route, SolarSystem
from ..models.entities import (
    CommandCenterDetails,
    ExtractorDetails,
    ExtractorHead,
    FactoryDetails,
    Pin,
    PinKind,
    PinStatus,
    Schematic,
    Type,
)
from ..reference.cache import ReferenceCache
from ..status.engine import get_colony_status, get_pin_status
from ..status.overview import get_colony_overview
from .raw_data import ParsedPin, ParsedPlanetDetail, ParsedRoute, RawTimestamp
from .snapshot_parser import SnapshotParser

logger = logging.getLogger(__name__)

_KIND_BY_GROUP = {
    EXTRACTOR_CONTROL_GROUP_ID: PinKind.EXTRACTOR,
    PROCESSOR_GROUP_ID: PinKind.FACTORY,
    STORAGE_GROUP_ID: PinKind.STORAGE,
    SPACEPORT_GROUP_ID: PinKind.LAUNCHPAD,
    COMMAND_CENTER_GROUP_ID: PinKind.COMMAND_CENTER,
}


def parse_timestamp(value: Optional[RawTimestamp]) -> Optional[datetime]:
    """
    Parses an ISO-8601 timestamp into an aware UTC datetime. Naive values are taken
    to be UTC. Returns None for missing or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Could not parse timestamp '{value}'.")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ColonyConverter:
    """
    Builds a Colony from a parsed planet-detail snapshot.

    All reference data comes from the injected ReferenceCache. Reference gaps never
    raise: unknown types become "Unknown" with unit volume and unknown schematics
    leave the factory without a recipe. Every gap is logged.
    """

    def __init__(self, cache: ReferenceCache, parser: Optional[SnapshotParser] = None):
        self._cache = cache
        self._parser = parser or SnapshotParser()

    def convert(
        self,
        detail: Union[ParsedPlanetDetail, Mapping[str, Any]],
        character_id: int,
        planet_id: int,
        planet_name: str,
        planet_type: str,
        system_id: int,
        system_name: str,
        upgrade_level: int,
        last_update: Optional[RawTimestamp] = None,
        now: Optional[datetime] = None,
    ) -> Colony:
        """
        Converts one snapshot. `now` is the reference time for extractor activity and
        pin statuses and defaults to the current UTC time. `last_update` becomes both
        simulation timestamps; a missing or unparseable value falls back to `now`.
        """
        if not isinstance(detail, ParsedPlanetDetail):
            detail = self._parser.parse(detail)

        now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
        colony_id = f"{character_id}_{planet_id}"
        logger.info(f"Converting colony '{colony_id}' ({planet_name}, {len(detail.pins)} pins).")

        update_time = parse_timestamp(last_update) or now

        self._check_route_endpoints(colony_id, detail)

        routes = [self._convert_route(route) for route in detail.routes]
        pins = [self._convert_pin(raw_pin, upgrade_level, now) for raw_pin in detail.pins]
        for pin in pins:
            pin.status = get_pin_status(pin, now, routes)
            logger.debug(f"Pin {pin.designator} ({pin.name}): {pin.status}")

        links = [
            PlanetaryLink(
                source_pin_id=link.source_pin_id,
                destination_pin_id=link.destination_pin_id,
                link_level=link.link_level,
            )
            for link in detail.links
        ]

        status = get_colony_status(pins)
        overview = get_colony_overview(routes, pins)
        logger.info(f"Colony '{colony_id}' converted with status {status}.")

        return Colony(
            id=colony_id,
            checkpoint_sim_time=update_time,
            current_sim_time=update_time,
            character_id=character_id,
            system=SolarSystem(id=system_id, name=system_name),
            upgrade_level=upgrade_level,
            links=links,
            pins=pins,
            routes=routes,
            status=status,
            overview=overview,
            planet_id=planet_id,
            planet_name=planet_name,
            planet_type=planet_type,
        )

    # --- Reference lookups ---

    def resolve_type(self, type_id: int) -> Type:
        info = self._cache.get_type_info(type_id)
        if info is None:
            logger.warning(f"No type data for type id {type_id}; using '{UNKNOWN_TYPE_NAME}'.")
            return Type(id=type_id, name=UNKNOWN_TYPE_NAME, volume=UNKNOWN_TYPE_VOLUME)
        return Type(id=type_id, name=info.name, volume=info.volume)

    def resolve_schematic(self, schematic_id: int) -> Optional[Schematic]:
        record = self._cache.get_schematic_by_id(schematic_id)
        if record is None:
            logger.warning(f"No schematic data for schematic id {schematic_id}.")
            return None
        inputs = {
            self.resolve_type(type_id): quantity
            for type_id, quantity in zip(record.input_type_ids, record.input_values)
        }
        return Schematic(
            id=record.schematic_id,
            cycle_time=timedelta(seconds=record.cycle_time),
            output_type=self.resolve_type(record.output_type_id),
            output_quantity=record.output_value,
            inputs=inputs,
        )

    def _group_id(self, type_id: int) -> int:
        info = self._cache.get_type_info(type_id)
        if info is None or info.group_id is None:
            return 0
        return info.group_id

    # --- Conversion helpers ---

    @staticmethod
    def _check_route_endpoints(colony_id: str, detail: ParsedPlanetDetail):
        pin_ids = {pin.pin_id for pin in detail.pins}
        dangling = sorted(
            route.route_id
            for route in detail.routes
            if route.source_pin_id not in pin_ids or route.destination_pin_id not in pin_ids
        )
        if dangling:
            raise ColonyConversionError(
                f"Colony '{colony_id}' has routes that reference unknown pins: {dangling}"
            )

    def _convert_route(self, raw: ParsedRoute) -> Route:
        # Partial units still need room at the destination, so fractions round up.
        quantity = math.ceil(raw.quantity)
        if quantity != raw.quantity:
            logger.warning(f"Route {raw.route_id} carries a fractional quantity {raw.quantity}; using {quantity}.")
        return Route(
            type=self.resolve_type(raw.content_type_id),
            source_pin_id=raw.source_pin_id,
            destination_pin_id=raw.destination_pin_id,
            quantity=quantity,
            route_id=raw.route_id,
            waypoints=tuple(raw.waypoints),
        )

    def _convert_contents(self, raw: ParsedPin) -> Dict[Type, int]:
        contents: Dict[Type, int] = {}
        for content in raw.contents:
            content_type = self.resolve_type(content.type_id)
            contents[content_type] = contents.get(content_type, 0) + content.amount
        return contents

    def _convert_pin(self, raw: ParsedPin, upgrade_level: int, now: datetime) -> Pin:
        pin_type = self.resolve_type(raw.type_id)
        group_id = self._group_id(raw.type_id)
        kind = _KIND_BY_GROUP.get(group_id, PinKind.OTHER)
        last_cycle_start = parse_timestamp(raw.last_cycle_start)

        pin = Pin(
            id=raw.pin_id,
            type=pin_type,
            name=pin_type.name,
            designator=f"PIN-{raw.pin_id % 10000}",
            kind=kind,
            latitude=raw.latitude,
            longitude=raw.longitude,
            contents=self._convert_contents(raw),
            is_active=True,
            status=PinStatus.STATIC,
        )

        if kind is PinKind.EXTRACTOR:
            self._fill_extractor(pin, raw, now)
        elif kind is PinKind.FACTORY:
            self._fill_factory(pin, raw, last_cycle_start)
        elif kind is PinKind.COMMAND_CENTER:
            pin.details = CommandCenterDetails(level=upgrade_level)

        if kind in (PinKind.STORAGE, PinKind.LAUNCHPAD, PinKind.COMMAND_CENTER):
            logger.debug(f"{kind.value} {raw.pin_id} holds {len(pin.contents)} item types, {pin.capacity_used:.2f} m3 used.")
        elif kind is PinKind.OTHER:
            logger.debug(f"Pin {raw.pin_id} (group {group_id}) has no specialised handling.")
        return pin

    def _fill_extractor(self, pin: Pin, raw: ParsedPin, now: datetime):
        raw_details = raw.extractor_details
        if raw_details is None:
            logger.warning(f"Extractor {raw.pin_id} has no extractor details; treating it as not set up.")
            pin.is_active = False
            pin.status = PinStatus.NOT_SETUP
            return

        expiry_time = parse_timestamp(raw.expiry_time)
        product_type = (
            self.resolve_type(raw_details.product_type_id) if raw_details.product_type_id is not None else None
        )
        cycle_time = timedelta(seconds=raw_details.cycle_time) if raw_details.cycle_time is not None else None

        pin.last_run_time = parse_timestamp(raw.last_cycle_start)
        pin.is_active = expiry_time is not None and expiry_time > now
        pin.status = PinStatus.NOT_SETUP
        pin.details = ExtractorDetails(
            expiry_time=expiry_time,
            install_time=parse_timestamp(raw.install_time),
            cycle_time=cycle_time,
            head_radius=raw_details.head_radius,
            heads=tuple(ExtractorHead(latitude=head.latitude, longitude=head.longitude) for head in raw_details.heads),
            product_type=product_type,
            base_value=raw_details.qty_per_cycle,
        )
        logger.debug(
            f"Extractor {raw.pin_id}: product {product_type.name if product_type else 'none'}, "
            f"cycle {cycle_time}, {len(raw_details.heads)} heads."
        )

    def _fill_factory(self, pin: Pin, raw: ParsedPin, last_cycle_start: Optional[datetime]):
        if raw.factory_details is not None:
            schematic_id = raw.factory_details.schematic_id
        else:
            schematic_id = raw.schematic_id

        schematic = None
        if schematic_id is None:
            logger.warning(f"Factory {raw.pin_id} has no schematic.")
        else:
            schematic = self.resolve_schematic(schematic_id)

        pin.last_run_time = last_cycle_start
        pin.is_active = False
        pin.status = PinStatus.NOT_SETUP
        pin.details = FactoryDetails(
            schematic=schematic,
            has_received_inputs=False,
            received_inputs_last_cycle=False,
            last_cycle_start_time=last_cycle_start,
        )

