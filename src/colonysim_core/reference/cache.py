# src/colonysim_core/reference/cache.py
"""
Provides the memoising, populate-once cache over the reference data store.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

from ..constants import MISSING_ICON_FILE_NAME
from .exceptions import ReferenceQueryError
from .records import ResourceInfo, ResourceLevel, SchematicRecord, SystemInfo, TypeInfo
from .store import ReferenceDataStore

logger = logging.getLogger(__name__)


def parse_id_list(raw: Any) -> List[int]:
    """
    Splits a comma-delimited list of integers. Tokens that are not integers are
    skipped, so a corrupt token shows up as a length mismatch against its partner list.
    """
    if raw is None:
        return []
    values = []
    for token in str(raw).split(","):
        token = token.strip()
        try:
            values.append(int(token))
        except ValueError:
            continue
    return values


class ReferenceCache:
    """
    Single point of access to read-only game reference data for one session.

    Resources and schematics are bulk-loaded once by `preload()`. The first getter
    call triggers the preload if nobody has run it yet, and concurrent callers wait
    on the same completion event, so the bulk tables are never observed half built.
    After the preload the bulk tables are only read.

    Type and solar-system metadata are fetched lazily on first access and memoised
    behind a lock, including ids the database does not know. Failed queries
    are not memoised. Nothing is ever invalidated; a new session gets a new cache.

    Every getter returns None for missing data and never raises: store failures are
    logged and treated as misses.
    """

    def __init__(self, store: ReferenceDataStore):
        self._store = store
        self._preload_lock = threading.Lock()
        self._preloaded = threading.Event()
        self._memo_lock = threading.Lock()

        self._resource_info: Dict[int, ResourceInfo] = {}
        self._resource_levels: Dict[int, ResourceLevel] = {}
        self._schematics_by_output: Dict[int, SchematicRecord] = {}
        self._schematics_by_id: Dict[int, SchematicRecord] = {}
        self._type_info: Dict[int, Optional[TypeInfo]] = {}
        self._system_info: Dict[int, Optional[SystemInfo]] = {}

        self.clear_stats()
        logger.debug("ReferenceCache instance created.")

    @property
    def store(self) -> ReferenceDataStore:
        return self._store

    @property
    def is_preloaded(self) -> bool:
        return self._preloaded.is_set()

    # --- Bulk preload ---

    def preload(self):
        """Bulk-loads every PI resource and every schematic. Runs at most once."""
        with self._preload_lock:
            if self._preloaded.is_set():
                return
            self._load_resources()
            self._load_schematics()
            self._preloaded.set()
        logger.info(
            f"Reference cache preloaded: {len(self._resource_info)} resources, "
            f"{len(self._schematics_by_output)} schematics."
        )

    def _ensure_preloaded(self):
        if not self._preloaded.is_set():
            self.preload()

    def _load_resources(self):
        try:
            rows = self._store.fetch_pi_resources()
        except ReferenceQueryError as e:
            logger.error(f"Could not preload PI resources; every resource lookup will miss: {e}")
            return

        for row in rows:
            level = ResourceLevel.from_market_group(row["marketGroupID"])
            if level is None:
                continue
            type_id = row["type_id"]
            self._resource_info[type_id] = ResourceInfo(
                name=row["name"],
                icon_file_name=row["icon_filename"] or MISSING_ICON_FILE_NAME,
                market_group_id=row["marketGroupID"],
            )
            self._resource_levels[type_id] = level

    def _load_schematics(self):
        try:
            rows = self._store.fetch_schematics()
        except ReferenceQueryError as e:
            logger.error(f"Could not preload schematics; every schematic lookup will miss: {e}")
            return

        for row in rows:
            record = self._parse_schematic_row(row)
            if record is None:
                continue
            self._schematics_by_output[record.output_type_id] = record
            self._schematics_by_id[record.schematic_id] = record

    @staticmethod
    def _parse_schematic_row(row) -> Optional[SchematicRecord]:
        input_type_ids = parse_id_list(row["input_typeid"])
        input_values = parse_id_list(row["input_value"])
        if len(input_type_ids) != len(input_values):
            logger.warning(
                f"Schematic {row['schematic_id']} dropped: input type ids '{row['input_typeid']}' "
                f"and input values '{row['input_value']}' differ in length."
            )
            return None
        return SchematicRecord(
            schematic_id=row["schematic_id"],
            output_type_id=row["output_typeid"],
            name=row["name"] or "",
            cycle_time=int(row["cycle_time"]),
            output_value=int(row["output_value"]),
            input_type_ids=tuple(input_type_ids),
            input_values=tuple(input_values),
        )

    # --- Getters over the preloaded tables ---

    def get_resource_info(self, resource_id: int) -> Optional[ResourceInfo]:
        self._ensure_preloaded()
        return self._lookup('resource', self._resource_info, resource_id)

    def get_resource_level(self, resource_id: int) -> Optional[ResourceLevel]:
        """Tier of a PI resource; None means the item is not a PI resource."""
        self._ensure_preloaded()
        return self._lookup('level', self._resource_levels, resource_id)

    def get_schematic(self, resource_id: int) -> Optional[SchematicRecord]:
        """The schematic whose output is `resource_id`."""
        self._ensure_preloaded()
        return self._lookup('schematic', self._schematics_by_output, resource_id)

    def get_schematic_by_id(self, schematic_id: int) -> Optional[SchematicRecord]:
        self._ensure_preloaded()
        return self._lookup('schematic', self._schematics_by_id, schematic_id)

    def all_resource_ids(self) -> List[int]:
        self._ensure_preloaded()
        return sorted(self._resource_info)

    # --- Lazily memoised getters ---

    def get_type_info(self, type_id: int) -> Optional[TypeInfo]:
        with self._memo_lock:
            if type_id in self._type_info:
                self._stats['type']['hits'] += 1
                return self._type_info[type_id]
            self._stats['type']['misses'] += 1

        try:
            row = self._store.fetch_type_info(type_id)
        except ReferenceQueryError as e:
            logger.warning(f"Type info lookup failed for type {type_id}: {e}")
            return None
        if row is None:
            logger.debug(f"No type data for type {type_id}; remembering the miss.")
            with self._memo_lock:
                self._type_info[type_id] = None
            return None

        info = TypeInfo(
            name=row["name"],
            volume=float(row["volume"]) if row["volume"] is not None else 1.0,
            group_id=row["groupID"],
        )
        with self._memo_lock:
            self._type_info[type_id] = info
        return info

    def get_system_info(self, system_id: int) -> Optional[SystemInfo]:
        with self._memo_lock:
            if system_id in self._system_info:
                self._stats['system']['hits'] += 1
                return self._system_info[system_id]
            self._stats['system']['misses'] += 1

        try:
            row = self._store.fetch_system_info(system_id)
        except ReferenceQueryError as e:
            logger.warning(f"System info lookup failed for system {system_id}: {e}")
            return None
        if row is None or row["system_security"] is None:
            logger.debug(f"No usable system data for system {system_id}; remembering the miss.")
            with self._memo_lock:
                self._system_info[system_id] = None
            return None

        info = SystemInfo(
            name=row["solarSystemName"],
            security=float(row["system_security"]),
            region=row["regionName"],
        )
        with self._memo_lock:
            self._system_info[system_id] = info
        return info

    # --- Statistics ---

    def _lookup(self, table: str, mapping: Dict, key: int):
        value = mapping.get(key)
        with self._memo_lock:
            self._stats[table]['hits' if value is not None else 'misses'] += 1
        return value

    def get_stats(self) -> Dict[str, Dict[str, int]]:
        """Returns a copy of the hit/miss statistics per table."""
        with self._memo_lock:
            return {table: counts.copy() for table, counts in self._stats.items()}

    def clear_stats(self):
        """Resets the hit/miss statistics for this instance."""
        self._stats = {
            table: {'hits': 0, 'misses': 0}
            for table in ('resource', 'level', 'schematic', 'type', 'system')
        }
