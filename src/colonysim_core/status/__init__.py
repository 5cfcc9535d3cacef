# src/colonysim_core/status/__init__.py
from .engine import (
    get_pin_status,
    is_routed,
    get_capacity,
    get_colony_status,
    NOT_SETUP_STATUSES,
    NEEDS_ATTENTION_STATUSES,
)
from .overview import (
    get_colony_overview,
    final_product_quantities,
    summarize_extractors,
    ExtractorSummary,
    facility_icon_name,
)

__all__ = [
    "get_pin_status",
    "is_routed",
    "get_capacity",
    "get_colony_status",
    "NOT_SETUP_STATUSES",
    "NEEDS_ATTENTION_STATUSES",
    "get_colony_overview",
    "final_product_quantities",
    "summarize_extractors",
    "ExtractorSummary",
    "facility_icon_name",
]
