# src/colonysim_core/chain/demand.py
"""
Demand propagation over a resolved resource chain.

Every resource at the chain's highest tier is given a demand of one unit. Demand
then flows down tier by tier: a resource's demand is the sum, over every
higher-tier consumer that lists it as an input, of the consumer's demand times the
recipe ratio `input_value / output_value`. Quantities stay floating point and are
never rounded here.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

import networkx as nx
import numpy as np

from ..reference.records import SchematicRecord
from .models import ResourceChainInfo, ResourceDemand

logger = logging.getLogger(__name__)

SchematicLookup = Callable[[int], Optional[SchematicRecord]]


def _recipe_ratio(schematic: Optional[SchematicRecord], input_id: int) -> float:
    if schematic is None or not schematic.output_value:
        return 0.0
    input_value = schematic.input_value_for(input_id)
    if input_value is None:
        return 0.0
    return input_value / schematic.output_value


def build_chain_graph(
    chain: Sequence[ResourceChainInfo],
    schematic_lookup: Optional[SchematicLookup] = None,
) -> nx.DiGraph:
    """
    Builds the chain as a directed graph with an edge from every consumer to each of
    its inputs present in the chain. Nodes carry `name`, `level` and `can_produce`.
    With a `schematic_lookup`, edges also carry the recipe `ratio`.
    """
    graph = nx.DiGraph()
    for entry in chain:
        graph.add_node(
            entry.resource_id,
            name=entry.resource_name,
            level=int(entry.resource_level),
            can_produce=entry.can_produce,
        )

    for entry in chain:
        schematic = schematic_lookup(entry.resource_id) if schematic_lookup else None
        for input_id in entry.required_resources:
            if input_id not in graph:
                continue
            attributes = {}
            if schematic_lookup is not None:
                attributes["ratio"] = _recipe_ratio(schematic, input_id)
            graph.add_edge(entry.resource_id, input_id, **attributes)
    return graph


def consumers_of(graph: nx.DiGraph, resource_id: int) -> List[int]:
    """Ids of the chain resources that take `resource_id` as a direct input."""
    if resource_id not in graph:
        return []
    return sorted(graph.predecessors(resource_id))


def propagate_demand(chain: Sequence[ResourceChainInfo], schematic_lookup: SchematicLookup) -> Dict[int, float]:
    """Units of every chain resource needed for one unit of each top-tier resource."""
    if not chain:
        logger.warning("Cannot propagate demand over an empty chain.")
        return {}

    graph = build_chain_graph(chain, schematic_lookup)
    node_ids = [entry.resource_id for entry in chain]
    # ratios[i, j]: units of resource j consumed per unit of resource i.
    ratios = nx.to_numpy_array(graph, nodelist=node_ids, weight="ratio", nonedge=0.0)
    levels = np.array([int(entry.resource_level) for entry in chain])
    demand = np.zeros(len(chain))

    max_level = levels.max()
    demand[levels == max_level] = 1.0

    for level in range(max_level - 1, -1, -1):
        targets = levels == level
        if not targets.any():
            continue
        uppers = levels > level
        demand[targets] = demand[uppers] @ ratios[np.ix_(uppers, targets)]

    return {resource_id: float(quantity) for resource_id, quantity in zip(node_ids, demand)}


def tier0_demand(chain: Sequence[ResourceChainInfo], schematic_lookup: SchematicLookup) -> List[ResourceDemand]:
    """
    Demand for the chain's P0 resources, largest first. Empty when the chain has no
    P0 resources or their total demand is zero.
    """
    tier0 = [entry for entry in chain if entry.resource_level == 0]
    if not tier0:
        logger.warning("Chain has no P0 resources; no raw demand to report.")
        return []

    demand = propagate_demand(chain, schematic_lookup)
    if sum(demand.get(entry.resource_id, 0.0) for entry in tier0) <= 0:
        logger.warning("Total P0 demand is zero.")
        return []

    result = [
        ResourceDemand(
            resource_id=entry.resource_id,
            resource_name=entry.resource_name,
            icon_file_name=entry.icon_file_name,
            quantity=demand.get(entry.resource_id, 0.0),
        )
        for entry in tier0
    ]
    result.sort(key=lambda item: item.quantity, reverse=True)
    logger.info(f"Computed demand for {len(result)} P0 resources.")
    return result
