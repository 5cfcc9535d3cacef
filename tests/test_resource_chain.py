# tests/test_resource_chain.py
"""
Tests for upstream chain discovery and per-system feasibility.
"""
import threading

import pytest

from colonysim_core.chain import ResourceChainResolver, group_by_level
from colonysim_core.reference import ReferenceDataStore, ReferenceQueryError, ResourceLevel

from conftest import AMARR, JITA, PERIMETER


def _by_id(chain):
    return {entry.resource_id: entry for entry in chain}


# === Group 1: Chain discovery ===

def test_p2_chain_in_discovery_order(resolver):
    chain = resolver.calculate_full_resource_chain(3693, [JITA])
    assert [entry.resource_id for entry in chain] == [3693, 2393, 2073, 2395, 2287]


def test_required_resources_are_direct_inputs(resolver):
    entries = _by_id(resolver.calculate_full_resource_chain(3693, [JITA]))
    assert entries[3693].required_resources == (2393, 2395)
    assert entries[2393].required_resources == (2073,)
    assert entries[2395].required_resources == (2287,)
    assert entries[2073].required_resources == ()


def test_shared_inputs_appear_once_and_keep_their_requirements(resolver):
    chain = resolver.calculate_full_resource_chain(15317, [JITA])
    ids = [entry.resource_id for entry in chain]

    assert ids == [15317, 3693, 2393, 2073, 2395, 2287, 3725, 2396, 2288]
    assert len(ids) == len(set(ids))
    assert _by_id(chain)[2395].required_resources == (2287,)


def test_chain_is_closed_under_required_resources(resolver):
    chain = resolver.calculate_full_resource_chain(15317, [JITA])
    ids = {entry.resource_id for entry in chain}
    for entry in chain:
        assert set(entry.required_resources) <= ids


def test_entry_metadata(resolver):
    entry = resolver.calculate_full_resource_chain(3693, [JITA])[0]
    assert entry.resource_name == "Fertilizer"
    assert entry.icon_file_name == "fertilizer.png"
    assert entry.resource_level is ResourceLevel.P2


def test_p0_target_is_a_single_entry(resolver):
    chain = resolver.calculate_full_resource_chain(2073, [JITA])
    assert [entry.resource_id for entry in chain] == [2073]
    assert chain[0].required_resources == ()


def test_unknown_target_returns_none(resolver):
    assert resolver.calculate_full_resource_chain(2848, [JITA]) is None


def test_resource_without_schematic_stops_its_branch(resolver):
    chain = resolver.calculate_full_resource_chain(9100, [JITA])
    assert [entry.resource_id for entry in chain] == [9100]
    assert chain[0].required_resources == ()


def test_group_by_level(resolver):
    groups = group_by_level(resolver.calculate_full_resource_chain(15317, [JITA]))
    assert [e.resource_id for e in groups[ResourceLevel.P1]] == [2393, 2395, 2396]
    assert set(groups) == {ResourceLevel.P0, ResourceLevel.P1, ResourceLevel.P2, ResourceLevel.P3}


# === Group 2: Planet types and feasibility ===

def test_planet_types_and_names(resolver):
    entries = _by_id(resolver.calculate_full_resource_chain(3693, [JITA]))
    microorganisms = entries[2073]
    assert microorganisms.required_planet_types == (11, 2014, 2016)
    assert microorganisms.planet_type_names == ("Planet (Temperate)", "Planet (Oceanic)", "Planet (Barren)")
    assert entries[2393].required_planet_types == ()


def test_partial_availability(resolver):
    microorganisms = _by_id(resolver.calculate_full_resource_chain(3693, [JITA]))[2073]
    assert microorganisms.available_planet_types == (11, 2016)
    assert microorganisms.some_required_planet_types_available
    assert not microorganisms.all_required_planet_types_available
    assert not microorganisms.can_produce


def test_union_across_systems_makes_p0_producible(resolver):
    entries = _by_id(resolver.calculate_full_resource_chain(3693, [JITA, PERIMETER]))
    for p0 in (2073, 2287):
        assert entries[p0].all_required_planet_types_available
        assert entries[p0].can_produce
    # Refined resources have no planet types of their own and never report as producible.
    assert not entries[3693].can_produce
    assert not entries[2393].some_required_planet_types_available


def test_no_matching_planets(resolver):
    entries = _by_id(resolver.calculate_full_resource_chain(3693, [AMARR]))
    assert entries[2073].available_planet_types == ()
    assert not entries[2073].some_required_planet_types_available


def test_empty_system_list_is_infeasible(resolver):
    chain = resolver.calculate_full_resource_chain(3693, [])
    assert all(not entry.can_produce and entry.available_planet_types == () for entry in chain)


def test_more_systems_never_reduce_feasibility(resolver):
    small = _by_id(resolver.calculate_full_resource_chain(15317, [JITA]))
    large = _by_id(resolver.calculate_full_resource_chain(15317, [JITA, PERIMETER, AMARR]))
    for resource_id, entry in small.items():
        assert set(entry.available_planet_types) <= set(large[resource_id].available_planet_types)
        if entry.can_produce:
            assert large[resource_id].can_produce


class _NoUniverseStore(ReferenceDataStore):
    def fetch_system_planet_types(self, system_ids):
        raise ReferenceQueryError(details="no such table: universe")


def test_feasibility_query_failure_marks_everything_infeasible(reference_cache, reference_conn):
    resolver = ResourceChainResolver(reference_cache, _NoUniverseStore(reference_conn))
    chain = resolver.calculate_full_resource_chain(3693, [JITA, PERIMETER])

    assert [entry.resource_id for entry in chain] == [3693, 2393, 2073, 2395, 2287]
    for entry in chain:
        assert not entry.can_produce
        assert entry.available_planet_types == ()
        assert not entry.all_required_planet_types_available
        assert not entry.some_required_planet_types_available
    # Planet type requirements are still reported.
    assert _by_id(chain)[2073].required_planet_types == (11, 2014, 2016)


# === Group 3: Background resolution ===

def test_submit_delivers_result_to_callback(resolver):
    delivered = []
    done = threading.Event()

    def callback(chain):
        delivered.append(chain)
        done.set()

    future = resolver.submit_full_resource_chain(3693, [JITA, PERIMETER], callback)
    chain = future.result(timeout=10)

    assert done.wait(timeout=10)
    assert delivered == [chain]
    assert chain[0].resource_id == 3693


def test_submit_unknown_target_delivers_none(resolver):
    delivered = []
    done = threading.Event()

    def callback(chain):
        delivered.append(chain)
        done.set()

    assert resolver.submit_full_resource_chain(1, [JITA], callback).result(timeout=10) is None
    assert done.wait(timeout=10)
    assert delivered == [None]


def test_concurrent_resolutions_agree(resolver):
    futures = [resolver.submit_full_resource_chain(15317, [JITA, PERIMETER]) for _ in range(6)]
    results = [future.result(timeout=10) for future in futures]
    assert all(result == results[0] for result in results)
