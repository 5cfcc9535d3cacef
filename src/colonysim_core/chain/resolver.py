# src/colonysim_core/chain/resolver.py
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from ..reference.cache import ReferenceCache
from ..reference.exceptions import ReferenceQueryError
from ..reference.records import ResourceLevel
from ..reference.store import ReferenceDataStore
from .models import ResourceChainInfo

logger = logging.getLogger(__name__)

ChainCallback = Callable[[Optional[List[ResourceChainInfo]]], None]

# Result of expanding one resource: every id discovered so far (in discovery
# order) and the direct recipe inputs of every expanded resource.
_Expansion = Tuple[Tuple[int, ...], Mapping[int, Tuple[int, ...]]]


class ResourceChainResolver:
    """
    Discovers the full upstream production chain of a PI resource and checks, per
    resource, whether the planet types that yield it exist in a set of systems.

    Recipe data comes from the ReferenceCache; planet-type data is queried from the
    reference store in batches, one query per concern per resolution.
    """

    def __init__(
        self,
        cache: ReferenceCache,
        store: Optional[ReferenceDataStore] = None,
        max_workers: int = 4,
    ):
        self._cache = cache
        self._store = store or cache.store
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    # --- Public API ---

    def calculate_full_resource_chain(
        self, resource_id: int, system_ids: Sequence[int]
    ) -> Optional[List[ResourceChainInfo]]:
        """
        Resolves the chain for `resource_id` against `system_ids`.

        The first entry is the target; the rest follow in first-discovery order of a
        depth-first walk over recipe inputs. Returns None when the target is not a
        known PI resource.
        """
        info = self._cache.get_resource_info(resource_id)
        level = self._cache.get_resource_level(resource_id)
        if info is None or level is None:
            logger.error(f"Cannot resolve chain: no resource data for resource {resource_id}.")
            return None

        logger.info(f"Resolving resource chain for {info.name} ({level.level_name}) across {len(system_ids)} systems.")
        discovered, requirements = self._expand(resource_id, (resource_id,), frozenset({resource_id}))

        planet_types = self._load_planet_types(discovered)
        planet_type_names = self._load_planet_type_names(planet_types)
        available = self._load_available_planet_types(system_ids)

        chain = [
            self._build_entry(
                chain_id,
                requirements.get(chain_id, ()),
                planet_types.get(chain_id, []),
                planet_type_names,
                available,
            )
            for chain_id in discovered
        ]
        logger.info(f"Resolved chain for {info.name}: {len(chain)} resources.")
        return chain

    def submit_full_resource_chain(
        self,
        resource_id: int,
        system_ids: Sequence[int],
        callback: Optional[ChainCallback] = None,
    ) -> "Future[Optional[List[ResourceChainInfo]]]":
        """
        Runs `calculate_full_resource_chain` on a worker thread. `callback`, if given,
        receives the result once it is available. Cancelling the returned future
        before it starts discards the resolution; errors stay on the future.
        """
        future = self._get_executor().submit(self.calculate_full_resource_chain, resource_id, list(system_ids))

        if callback is not None:
            def _deliver(done: Future):
                if done.cancelled():
                    logger.debug(f"Chain resolution for resource {resource_id} was cancelled.")
                    return
                if done.exception() is not None:
                    logger.error(f"Chain resolution for resource {resource_id} failed: {done.exception()}")
                    return
                callback(done.result())

            future.add_done_callback(_deliver)
        return future

    def shutdown(self, wait: bool = True):
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    # --- Upstream walk ---

    def _expand(self, resource_id: int, discovered: Tuple[int, ...], path: FrozenSet[int]) -> _Expansion:
        """
        Expands `resource_id` into its recipe inputs, recursively.

        Returns the extended discovery order and the inputs of every expanded
        resource. Inputs already discovered through another branch are expanded
        again so every entry gets its own inputs; `path` holds the resources on the
        current branch and cuts cycles in malformed recipe data.
        """
        if self._cache.get_resource_level(resource_id) is ResourceLevel.P0:
            return discovered, {}

        schematic = self._cache.get_schematic(resource_id)
        if schematic is None:
            logger.error(f"No schematic produces resource {resource_id}; its inputs are unknown.")
            return discovered, {}

        requirements: Dict[int, Tuple[int, ...]] = {resource_id: schematic.input_type_ids}
        for input_id in schematic.input_type_ids:
            if self._cache.get_resource_info(input_id) is None or self._cache.get_resource_level(input_id) is None:
                logger.debug(f"Skipping input {input_id} of resource {resource_id}: not a known PI resource.")
                continue
            if input_id not in discovered:
                discovered = discovered + (input_id,)
            if input_id in path:
                logger.warning(f"Recipe cycle detected at resource {input_id} (from {resource_id}); not expanding it again.")
                continue
            discovered, upstream = self._expand(input_id, discovered, path | {input_id})
            requirements = {**requirements, **upstream}
        return discovered, requirements

    # --- Planet type data ---

    def _load_planet_types(self, resource_ids: Sequence[int]) -> Dict[int, List[int]]:
        try:
            planet_types = self._store.fetch_planet_types_for_resources(resource_ids)
        except ReferenceQueryError as e:
            logger.error(f"Failed to load planet types for resources: {e}")
            return {}
        logger.debug(f"Loaded planet types for {len(planet_types)} of {len(resource_ids)} resources.")
        return planet_types

    def _load_planet_type_names(self, planet_types: Mapping[int, List[int]]) -> Dict[int, str]:
        all_types = sorted({planet_type for types in planet_types.values() for planet_type in types})
        try:
            return self._store.fetch_type_names(all_types)
        except ReferenceQueryError as e:
            logger.error(f"Failed to load planet type names: {e}")
            return {}

    def _load_available_planet_types(self, system_ids: Sequence[int]) -> Optional[Set[int]]:
        """Union of planet types present in the given systems, or None if the lookup failed."""
        try:
            per_system = self._store.fetch_system_planet_types(system_ids)
        except ReferenceQueryError as e:
            logger.error(f"Failed to load planet data for systems; marking every resource as not producible: {e}")
            return None

        available: Set[int] = set()
        for planet_types in per_system.values():
            available |= planet_types
        logger.debug(f"{len(per_system)} systems provide planet types {sorted(available)}.")
        return available

    def _build_entry(
        self,
        resource_id: int,
        required_resources: Tuple[int, ...],
        required_planet_types: List[int],
        planet_type_names: Mapping[int, str],
        available: Optional[Set[int]],
    ) -> ResourceChainInfo:
        info = self._cache.get_resource_info(resource_id)
        level = self._cache.get_resource_level(resource_id)
        required = set(required_planet_types)

        if available is None:
            available_types: Set[int] = set()
            all_available = False
        else:
            available_types = required & available
            all_available = bool(required) and required <= available

        return ResourceChainInfo(
            resource_id=resource_id,
            resource_name=info.name,
            icon_file_name=info.icon_file_name,
            resource_level=level,
            required_resources=tuple(required_resources),
            required_planet_types=tuple(required_planet_types),
            planet_type_names=tuple(planet_type_names[t] for t in required_planet_types if t in planet_type_names),
            can_produce=all_available,
            available_planet_types=tuple(sorted(available_types)),
            all_required_planet_types_available=all_available,
            some_required_planet_types_available=bool(available_types),
        )

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="chain-resolver")
            return self._executor
