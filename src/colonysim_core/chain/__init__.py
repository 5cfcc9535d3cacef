# src/colonysim_core/chain/__init__.py
from .models import ResourceChainInfo, ResourceDemand, group_by_level
from .resolver import ResourceChainResolver
from .demand import build_chain_graph, consumers_of, propagate_demand, tier0_demand

__all__ = [
    "ResourceChainInfo",
    "ResourceDemand",
    "group_by_level",
    "ResourceChainResolver",
    "build_chain_graph",
    "consumers_of",
    "propagate_demand",
    "tier0_demand",
]
