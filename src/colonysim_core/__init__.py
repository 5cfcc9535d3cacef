# src/colonysim_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("ColonySim Core package initialized.")

from .models import Type, Schematic, Pin, PinKind, PinStatus, Route, Colony, ColonyStatus, ColonyStatusKind, ColonyOverview
from .reference import ReferenceDataStore, ReferenceCache, ResourceLevel
from .converter import SnapshotParser, ColonyConverter
from .status import get_pin_status, get_colony_status, get_colony_overview, is_routed, get_capacity
from .chain import ResourceChainResolver, ResourceChainInfo, propagate_demand, tier0_demand
from .extraction import get_program_output, get_program_output_prediction
from .config import EngineConfig, load_engine_config, ConfigParsingError
from .engine import PlanetaryEngine
from .errors import ColonySimError, ColonyConversionError, DiagnosableError

__all__ = [
    # Entities
    "Type", "Schematic", "Pin", "PinKind", "PinStatus", "Route",
    "Colony", "ColonyStatus", "ColonyStatusKind", "ColonyOverview",
    # Reference data
    "ReferenceDataStore", "ReferenceCache", "ResourceLevel",
    # Conversion
    "SnapshotParser", "ColonyConverter",
    # Status derivation
    "get_pin_status", "get_colony_status", "get_colony_overview", "is_routed", "get_capacity",
    # Resource chains
    "ResourceChainResolver", "ResourceChainInfo", "propagate_demand", "tier0_demand",
    # Extraction
    "get_program_output", "get_program_output_prediction",
    # Configuration and facade
    "EngineConfig", "load_engine_config", "ConfigParsingError", "PlanetaryEngine",
    # Top-Level Errors
    "ColonySimError", "ColonyConversionError", "DiagnosableError",
]
