# src/colonysim_core/models/__init__.py
from .entities import (
    Type,
    Schematic,
    PinStatus,
    RoutedState,
    PinKind,
    ExtractorHead,
    ExtractorDetails,
    FactoryDetails,
    CommandCenterDetails,
    Pin,
)
from .colony import (
    Route,
    PlanetaryLink,
    SolarSystem,
    ColonyStatusKind,
    ColonyStatus,
    ColonyOverview,
    Colony,
)

__all__ = [
    # Entities
    "Type", "Schematic", "PinStatus", "RoutedState", "PinKind",
    "ExtractorHead", "ExtractorDetails", "FactoryDetails", "CommandCenterDetails", "Pin",
    # Colony
    "Route", "PlanetaryLink", "SolarSystem",
    "ColonyStatusKind", "ColonyStatus", "ColonyOverview", "Colony",
]
