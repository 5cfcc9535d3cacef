# --- src/colonysim_core/constants.py ---
import logging
from typing import Dict

logger = logging.getLogger(__name__)

# --- Facility group ids (types.groupID of the pin's item type) ---

COMMAND_CENTER_GROUP_ID: int = 1027
PROCESSOR_GROUP_ID: int = 1028
STORAGE_GROUP_ID: int = 1029
SPACEPORT_GROUP_ID: int = 1030
EXTRACTOR_CONTROL_GROUP_ID: int = 1063

# --- Facility capacities (m3) ---

STORAGE_CAPACITY: int = 12000
COMMAND_CENTER_CAPACITY: int = 500
LAUNCHPAD_CAPACITY: int = 10000

# --- PI market groups, one per resource tier (P0..P4) ---

PI_MARKET_GROUP_IDS = (1333, 1334, 1335, 1336, 1337)

#: Dogma attribute that links a harvestable source type to the planet type it occurs on.
PLANET_TYPE_ATTRIBUTE_ID: int = 1632

#: Planet type id -> column name in the `universe` table.
PLANET_TYPE_TO_COLUMN: Dict[int, str] = {
    11: "temperate",
    12: "ice",
    13: "gas",
    2014: "oceanic",
    2015: "lava",
    2016: "barren",
    2017: "storm",
    2063: "plasma",
}

COLUMN_TO_PLANET_TYPE: Dict[str, int] = {column: type_id for type_id, column in PLANET_TYPE_TO_COLUMN.items()}

# --- Reference data fallbacks ---

UNKNOWN_TYPE_NAME: str = "Unknown"
UNKNOWN_TYPE_VOLUME: float = 1.0
MISSING_ICON_FILE_NAME: str = "not_found"

logger.debug("Defined facility group ids, capacities and PI market groups.")
