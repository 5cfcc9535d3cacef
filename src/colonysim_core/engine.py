# src/colonysim_core/engine.py
"""
Defines `PlanetaryEngine`, the facade that wires the reference data store, the
reference cache, the colony converter and the resource chain resolver together.

The engine holds no simulation state of its own. Colonies and chains are computed
on request from the inputs passed in; the only shared state is the reference cache.
"""
import logging
from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from .chain.demand import tier0_demand
from .chain.models import ResourceChainInfo, ResourceDemand
from .chain.resolver import ChainCallback, ResourceChainResolver
from .config import EngineConfig, load_engine_config
from .converter.converter import ColonyConverter
from .converter.raw_data import ParsedPlanetDetail
from .log_config import setup_logging
from .models.colony import Colony
from .reference.cache import ReferenceCache
from .reference.store import ReferenceDataStore
from .status.overview import ExtractorSummary, summarize_extractors

logger = logging.getLogger(__name__)


class PlanetaryEngine:
    def __init__(self, store: ReferenceDataStore, config: Optional[EngineConfig] = None):
        self.config = config
        self.store = store
        self.cache = ReferenceCache(store)
        self.converter = ColonyConverter(self.cache)
        self.resolver = ResourceChainResolver(
            self.cache,
            store,
            max_workers=config.max_workers if config else 4,
        )
        self._expiring_window = timedelta(hours=config.expiring_soon_hours if config else 1.0)

    @classmethod
    def from_config(cls, config: Union[EngineConfig, str, Path, Mapping[str, Any]]) -> "PlanetaryEngine":
        """Builds an engine from an EngineConfig, a YAML config file or a config mapping."""
        if not isinstance(config, EngineConfig):
            config = load_engine_config(config)
        setup_logging(config.log_level)
        logger.info(f"Starting planetary engine with reference data at {config.reference_db}")
        return cls(ReferenceDataStore.from_path(config.reference_db), config)

    def preload(self):
        self.cache.preload()

    def convert_colony(self, detail: Union[ParsedPlanetDetail, Mapping[str, Any]], **kwargs) -> Colony:
        """Converts one snapshot; keyword arguments are passed to `ColonyConverter.convert`."""
        return self.converter.convert(detail, **kwargs)

    def resolve_chain(self, resource_id: int, system_ids: Sequence[int]) -> Optional[List[ResourceChainInfo]]:
        return self.resolver.calculate_full_resource_chain(resource_id, system_ids)

    def submit_chain(
        self,
        resource_id: int,
        system_ids: Sequence[int],
        callback: Optional[ChainCallback] = None,
    ) -> Future:
        return self.resolver.submit_full_resource_chain(resource_id, system_ids, callback)

    def demand_for(self, chain: Sequence[ResourceChainInfo]) -> List[ResourceDemand]:
        """P0 demand for one unit of every top-tier product of `chain`, largest first."""
        return tier0_demand(chain, self.cache.get_schematic)

    def extractor_summary(self, colony: Colony, now: Optional[datetime] = None) -> ExtractorSummary:
        return summarize_extractors(colony.pins, now or datetime.now(timezone.utc), self._expiring_window)

    def close(self):
        self.resolver.shutdown()
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
