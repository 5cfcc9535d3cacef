# src/colonysim_core/converter/snapshot_parser.py
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import cerberus
import yaml

from .exceptions import SnapshotParsingError, SnapshotSchemaError
from .raw_data import (
    ParsedContent,
    ParsedExtractorDetails,
    ParsedExtractorHead,
    ParsedFactoryDetails,
    ParsedLink,
    ParsedPin,
    ParsedPlanetDetail,
    ParsedRoute,
)

logger = logging.getLogger(__name__)


class SnapshotValidator(cerberus.Validator):
    """Cerberus validator with a uniqueness rule for lists of records."""

    def _validate_unique_elements_by_key(self, key_for_uniqueness, field, value):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return

        seen_keys = set()
        duplicates = set()
        for item in value:
            if not isinstance(item, dict):
                continue
            item_key = item.get(key_for_uniqueness)
            if item_key is None:
                continue
            if item_key in seen_keys:
                duplicates.add(item_key)
            seen_keys.add(item_key)

        if duplicates:
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': {sorted(duplicates)}")


class SnapshotParser:
    """
    Validates a raw planet-detail snapshot (the ESI `links`/`pins`/`routes` shape)
    and turns it into the frozen IR consumed by the ColonyConverter.
    """
    _id_rule = {"type": "integer", "required": True}
    _timestamp_rule = {"type": ["string", "datetime"], "nullable": True, "default": None}
    _optional_int_rule = {"type": "integer", "nullable": True, "default": None}

    _content_schema = {
        "type_id": _id_rule,
        "amount": {"type": "integer", "required": True, "min": 0},
    }

    _head_schema = {
        "head_id": {"type": "integer", "default": 0},
        "latitude": {"type": "number", "required": True},
        "longitude": {"type": "number", "required": True},
    }

    _extractor_details_schema = {
        "cycle_time": _optional_int_rule,
        "head_radius": {"type": "number", "nullable": True, "default": None},
        "heads": {"type": "list", "default": [], "schema": {"type": "dict", "schema": _head_schema}},
        "product_type_id": _optional_int_rule,
        "qty_per_cycle": _optional_int_rule,
    }

    _pin_schema = {
        "pin_id": _id_rule,
        "type_id": _id_rule,
        "latitude": {"type": "number", "required": True},
        "longitude": {"type": "number", "required": True},
        "contents": {"type": "list", "default": [], "schema": {"type": "dict", "schema": _content_schema}},
        "install_time": _timestamp_rule,
        "expiry_time": _timestamp_rule,
        "last_cycle_start": _timestamp_rule,
        "schematic_id": _optional_int_rule,
        "extractor_details": {"type": "dict", "nullable": True, "default": None, "schema": _extractor_details_schema},
        "factory_details": {"type": "dict", "nullable": True, "default": None, "schema": {"schematic_id": _id_rule}},
    }

    _route_schema = {
        "route_id": _id_rule,
        "source_pin_id": _id_rule,
        "destination_pin_id": _id_rule,
        "content_type_id": _id_rule,
        "quantity": {"type": "number", "required": True, "min": 0},
        "waypoints": {"type": "list", "default": [], "schema": {"type": "integer"}},
    }

    _link_schema = {
        "source_pin_id": _id_rule,
        "destination_pin_id": _id_rule,
        "link_level": {"type": "integer", "default": 0, "min": 0},
    }

    _schema = {
        "pins": {"type": "list", "required": True, "unique_elements_by_key": "pin_id", "schema": {"type": "dict", "schema": _pin_schema}},
        "links": {"type": "list", "default": [], "schema": {"type": "dict", "schema": _link_schema}},
        "routes": {"type": "list", "default": [], "unique_elements_by_key": "route_id", "schema": {"type": "dict", "schema": _route_schema}},
    }

    def __init__(self):
        logger.debug("SnapshotParser initialized.")

    def _new_validator(self) -> SnapshotValidator:
        # A validator keeps the last document and its errors, so each parse gets its own.
        validator = SnapshotValidator(self._schema)
        # ESI adds fields over time; unknown keys are ignored rather than rejected.
        validator.allow_unknown = True
        return validator

    def parse(self, raw: Mapping[str, Any], source_path: Optional[Path] = None) -> ParsedPlanetDetail:
        """Validates one raw planet-detail mapping and returns its IR."""
        if not isinstance(raw, Mapping):
            raise SnapshotParsingError(details="The root of a snapshot must be a mapping.", file_path=source_path)
        validator = self._new_validator()
        if not validator.validate(dict(raw)):
            raise SnapshotSchemaError(validator.errors, source_path)

        document = validator.document
        detail = ParsedPlanetDetail(
            pins=tuple(self._build_pin(pin) for pin in document["pins"]),
            links=tuple(
                ParsedLink(
                    source_pin_id=link["source_pin_id"],
                    destination_pin_id=link["destination_pin_id"],
                    link_level=link["link_level"],
                )
                for link in document["links"]
            ),
            routes=tuple(
                ParsedRoute(
                    route_id=route["route_id"],
                    source_pin_id=route["source_pin_id"],
                    destination_pin_id=route["destination_pin_id"],
                    content_type_id=route["content_type_id"],
                    quantity=float(route["quantity"]),
                    waypoints=tuple(route["waypoints"]),
                )
                for route in document["routes"]
            ),
            source_path=source_path,
        )
        logger.debug(
            f"Parsed snapshot with {len(detail.pins)} pins, {len(detail.links)} links "
            f"and {len(detail.routes)} routes."
        )
        return detail

    def parse_file(self, path: Union[str, Path]) -> ParsedPlanetDetail:
        """Loads a JSON or YAML snapshot file and parses it."""
        source = Path(path).resolve()
        logger.info(f"Parsing colony snapshot file: {source}")
        return self.parse(self._load(source), source_path=source)

    @staticmethod
    def _build_pin(pin: Dict[str, Any]) -> ParsedPin:
        extractor_details = None
        if pin["extractor_details"] is not None:
            raw_details = pin["extractor_details"]
            extractor_details = ParsedExtractorDetails(
                cycle_time=raw_details["cycle_time"],
                head_radius=raw_details["head_radius"],
                heads=tuple(
                    ParsedExtractorHead(head_id=head["head_id"], latitude=head["latitude"], longitude=head["longitude"])
                    for head in raw_details["heads"]
                ),
                product_type_id=raw_details["product_type_id"],
                qty_per_cycle=raw_details["qty_per_cycle"],
            )

        factory_details = None
        if pin["factory_details"] is not None:
            factory_details = ParsedFactoryDetails(schematic_id=pin["factory_details"]["schematic_id"])

        return ParsedPin(
            pin_id=pin["pin_id"],
            type_id=pin["type_id"],
            latitude=float(pin["latitude"]),
            longitude=float(pin["longitude"]),
            contents=tuple(ParsedContent(type_id=c["type_id"], amount=c["amount"]) for c in pin["contents"]),
            install_time=pin["install_time"],
            expiry_time=pin["expiry_time"],
            last_cycle_start=pin["last_cycle_start"],
            schematic_id=pin["schematic_id"],
            extractor_details=extractor_details,
            factory_details=factory_details,
        )

    @staticmethod
    def _load(source: Path) -> Dict[str, Any]:
        if not source.is_file():
            raise SnapshotParsingError(details=f"Snapshot file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise SnapshotParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise SnapshotParsingError(details=f"Invalid JSON/YAML syntax: {e}", file_path=source) from e

        if content is None:
            raise SnapshotParsingError(details="The snapshot file is empty.", file_path=source)
        if not isinstance(content, dict):
            raise SnapshotParsingError(details="The root of the snapshot file must be a mapping.", file_path=source)
        return content
