# src/colonysim_core/reference/store.py
"""
Provides the read-only query service over the static game reference database.
"""
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Union

from ..constants import COLUMN_TO_PLANET_TYPE, PI_MARKET_GROUP_IDS, PLANET_TYPE_ATTRIBUTE_ID
from .exceptions import ReferenceQueryError

logger = logging.getLogger(__name__)


def connect_reference_db(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Opens the reference database read-only and shareable across worker threads."""
    path = Path(db_path)
    if not path.is_file():
        raise ReferenceQueryError(details=f"Reference database not found at path: {path}")
    conn = sqlite3.connect(f"file:{path}?mode=ro", uri=True, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def _placeholders(values: Sequence) -> str:
    return ",".join("?" for _ in values)


class ReferenceDataStore:
    """
    Keyed lookups against the reference database: item types, schematics, harvest
    sources, planet types and solar systems.

    Every public method either returns plain data or raises ReferenceQueryError.
    A single connection is shared and all statements run under a lock, so one store
    may serve the cache and several resolver threads at once.
    """

    def __init__(self, conn: sqlite3.Connection):
        if conn.row_factory is not sqlite3.Row:
            conn.row_factory = sqlite3.Row
        self._conn = conn
        self._lock = threading.Lock()

    @classmethod
    def from_path(cls, db_path: Union[str, Path]) -> "ReferenceDataStore":
        return cls(connect_reference_db(db_path))

    def close(self):
        with self._lock:
            self._conn.close()

    def execute(self, query: str, parameters: Iterable = ()) -> List[sqlite3.Row]:
        """Runs one statement and returns all rows."""
        params = tuple(parameters)
        try:
            with self._lock:
                return self._conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Reference query failed ({e}): {' '.join(query.split())[:200]}")
            raise ReferenceQueryError(details=str(e), query=query) from e

    # --- Bulk loads used by ReferenceCache.preload ---

    def fetch_pi_resources(self) -> List[sqlite3.Row]:
        query = f"""
            SELECT type_id, name, icon_filename, marketGroupID
            FROM types
            WHERE marketGroupID IN ({_placeholders(PI_MARKET_GROUP_IDS)})
        """
        return self.execute(query, PI_MARKET_GROUP_IDS)

    def fetch_schematics(self) -> List[sqlite3.Row]:
        query = """
            SELECT schematic_id, output_typeid, name, cycle_time, output_value, input_typeid, input_value
            FROM planetSchematics
        """
        return self.execute(query)

    # --- Keyed lookups ---

    def fetch_type_info(self, type_id: int) -> Optional[sqlite3.Row]:
        rows = self.execute("SELECT name, volume, groupID FROM types WHERE type_id = ?", (type_id,))
        return rows[0] if rows else None

    def fetch_system_info(self, system_id: int) -> Optional[sqlite3.Row]:
        query = """
            SELECT s.solarSystemName, u.system_security, r.regionName
            FROM solarsystems s
            JOIN universe u ON s.solarSystemID = u.solarsystem_id
            JOIN regions r ON r.regionID = u.region_id
            WHERE s.solarSystemID = ?
        """
        rows = self.execute(query, (system_id,))
        return rows[0] if rows else None

    def fetch_type_names(self, type_ids: Sequence[int]) -> Dict[int, str]:
        if not type_ids:
            return {}
        ids = sorted(set(type_ids))
        rows = self.execute(f"SELECT type_id, name FROM types WHERE type_id IN ({_placeholders(ids)})", ids)
        return {row["type_id"]: row["name"] for row in rows}

    # --- Planetary lookups used by the resource chain resolver ---

    def fetch_planet_types_for_resources(self, resource_ids: Sequence[int]) -> Dict[int, List[int]]:
        """
        Maps each resource id to the planet type ids that can yield it, joining the
        harvestable source types to their planet-type attribute in a single query.
        Resources with no harvestable source are absent from the result.
        """
        if not resource_ids:
            return {}
        ids = sorted(set(resource_ids))
        query = f"""
            WITH ResourceHarvester AS (
                SELECT DISTINCT ph.typeid AS resource_id, ph.harvest_typeid
                FROM planetResourceHarvest ph
                WHERE ph.typeid IN ({_placeholders(ids)})
            ),
            PlanetTypes AS (
                SELECT rh.resource_id, ta.value AS planet_type_id
                FROM ResourceHarvester rh
                JOIN typeAttributes ta ON ta.type_id = rh.harvest_typeid
                WHERE ta.attribute_id = ?
            )
            SELECT resource_id, GROUP_CONCAT(planet_type_id) AS planet_types
            FROM PlanetTypes
            GROUP BY resource_id
        """
        rows = self.execute(query, [*ids, PLANET_TYPE_ATTRIBUTE_ID])

        planet_types: Dict[int, List[int]] = {}
        for row in rows:
            if row["planet_types"] is None:
                continue
            parsed: Set[int] = set()
            for token in str(row["planet_types"]).split(","):
                try:
                    parsed.add(int(float(token.strip())))
                except ValueError:
                    logger.debug(f"Ignoring non-numeric planet type '{token}' for resource {row['resource_id']}")
            planet_types[int(row["resource_id"])] = sorted(parsed)
        return planet_types

    def fetch_system_planet_types(self, system_ids: Sequence[int]) -> Dict[int, Set[int]]:
        """Maps each known system id to the set of planet type ids present in it."""
        if not system_ids:
            return {}
        ids = sorted(set(system_ids))
        columns = ", ".join(COLUMN_TO_PLANET_TYPE)
        query = f"SELECT solarsystem_id, {columns} FROM universe WHERE solarsystem_id IN ({_placeholders(ids)})"
        rows = self.execute(query, ids)

        result: Dict[int, Set[int]] = {}
        for row in rows:
            result[row["solarsystem_id"]] = {
                planet_type for column, planet_type in COLUMN_TO_PLANET_TYPE.items()
                if (row[column] or 0) > 0
            }
        return result
