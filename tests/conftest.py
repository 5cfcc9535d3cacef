# tests/conftest.py
"""
Shared fixtures: an in-memory reference database seeded with a small, closed set
of PI recipes, plus the cache, converter and resolver built on top of it.

Seeded recipe tree (ids follow the game's static data where they exist):

    P3 15317 Genetically Enhanced Livestock <- 3693 Fertilizer x10 + 3725 Livestock x10 (makes 3)
    P2 3693 Fertilizer   <- 2393 Bacteria x40 + 2395 Proteins x40 (makes 5)
    P2 3725 Livestock    <- 2395 Proteins x40 + 2396 Biofuels x40 (makes 5)
    P1 2393 Bacteria     <- 2073 Microorganisms x3000 (makes 20)
    P1 2395 Proteins     <- 2287 Complex Organisms x3000 (makes 20)
    P1 2396 Biofuels     <- 2288 Carbon Compounds x3000 (makes 20)
    P1 3645 Water        <- 2268 Aqueous Liquids x3000 (makes 20)
    P2 9100 Broken Widget has a malformed schematic and is dropped by the cache.
"""
import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from colonysim_core.chain import ResourceChainResolver
from colonysim_core.converter import ColonyConverter
from colonysim_core.models import (
    ExtractorDetails,
    Pin,
    PinKind,
    PinStatus,
    Route,
    Schematic,
    Type,
)
from colonysim_core.reference import ReferenceCache, ReferenceDataStore, create_reference_schema

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

# --- Seed data ---

# (type_id, name, volume, groupID, marketGroupID, icon_filename)
TYPES = [
    # P0
    (2073, "Microorganisms", 0.01, 1032, 1333, "microorganisms.png"),
    (2268, "Aqueous Liquids", 0.01, 1032, 1333, "aqueous_liquids.png"),
    (2287, "Complex Organisms", 0.01, 1032, 1333, "complex_organisms.png"),
    (2288, "Carbon Compounds", 0.01, 1032, 1333, "carbon_compounds.png"),
    # P1
    (2393, "Bacteria", 0.38, 1042, 1334, "bacteria.png"),
    (2395, "Proteins", 0.38, 1042, 1334, "proteins.png"),
    (2396, "Biofuels", 0.38, 1042, 1334, "biofuels.png"),
    (3645, "Water", 0.38, 1042, 1334, ""),
    # P2
    (3693, "Fertilizer", 1.5, 1034, 1335, "fertilizer.png"),
    (3725, "Livestock", 1.5, 1034, 1335, "livestock.png"),
    (9100, "Broken Widget", 1.5, 1034, 1335, "broken.png"),
    # P3
    (15317, "Genetically Enhanced Livestock", 6.0, 1040, 1336, "gel.png"),
    # Facilities
    (2524, "Barren Command Center", 1000.0, 1027, None, None),
    (2473, "Barren Basic Industry Facility", 0.0, 1028, None, None),
    (2474, "Barren Advanced Industry Facility", 0.0, 1028, None, None),
    (2541, "Barren Storage Facility", 0.0, 1029, None, None),
    (2544, "Barren Launchpad", 0.0, 1030, None, None),
    (2848, "Barren Extractor Control Unit", 0.0, 1063, None, None),
    (4242, "Planetary Oddity", 0.0, 9999, None, None),
    # Planet types
    (11, "Planet (Temperate)", 1.0, 7, None, None),
    (12, "Planet (Ice)", 1.0, 7, None, None),
    (13, "Planet (Gas)", 1.0, 7, None, None),
    (2014, "Planet (Oceanic)", 1.0, 7, None, None),
    (2015, "Planet (Lava)", 1.0, 7, None, None),
    (2016, "Planet (Barren)", 1.0, 7, None, None),
    (2017, "Planet (Storm)", 1.0, 7, None, None),
    (2063, "Planet (Plasma)", 1.0, 7, None, None),
]

# (schematic_id, output_typeid, name, cycle_time, output_value, input_typeid, input_value)
SCHEMATICS = [
    (126, 2393, "Bacteria", 1800, 20, "2073", "3000"),
    (127, 3645, "Water", 1800, 20, "2268", "3000"),
    (128, 2395, "Proteins", 1800, 20, "2287", "3000"),
    (129, 2396, "Biofuels", 1800, 20, "2288", "3000"),
    (70, 3693, "Fertilizer", 3600, 5, "2393,2395", "40,40"),
    (71, 3725, "Livestock", 3600, 5, "2395, 2396", "40, 40"),
    (90, 15317, "Genetically Enhanced Livestock", 3600, 3, "3693,3725", "10,10"),
    (99, 9100, "Broken Widget", 3600, 5, "2393,2395", "40"),
]

# (resource typeid, harvestable source typeid)
HARVESTS = [
    (2073, 2300), (2073, 2301), (2073, 2302),
    (2268, 2320), (2268, 2321),
    (2287, 2310), (2287, 2311),
    (2288, 2330), (2288, 2331),
]

# (harvestable source typeid, planet type id)
HARVEST_PLANET_TYPES = [
    (2300, 11), (2301, 2016), (2302, 2014),
    (2320, 11), (2321, 12),
    (2310, 11), (2311, 2014),
    (2330, 2016), (2331, 11),
]

REGIONS = [(10000002, "The Forge"), (10000043, "Domain")]

# (solarSystemID, name, regionID, security, temperate, barren, oceanic, ice, gas, lava, storm, plasma)
SYSTEMS = [
    (30000142, "Jita", 10000002, 0.95, 1, 2, 0, 0, 0, 0, 0, 0),
    (30000144, "Perimeter", 10000002, 0.9, 0, 0, 1, 1, 0, 0, 0, 0),
    (30002187, "Amarr", 10000043, 1.0, 0, 0, 0, 0, 2, 3, 0, 1),
]

JITA, PERIMETER, AMARR = 30000142, 30000144, 30002187


def seed_reference_db(conn: sqlite3.Connection):
    create_reference_schema(conn)
    conn.executemany("INSERT INTO types VALUES (?, ?, ?, ?, ?, ?)", TYPES)
    conn.executemany("INSERT INTO planetSchematics VALUES (?, ?, ?, ?, ?, ?, ?)", SCHEMATICS)
    conn.executemany("INSERT INTO planetResourceHarvest VALUES (?, ?)", HARVESTS)
    conn.executemany(
        "INSERT INTO typeAttributes VALUES (?, 1632, ?)",
        [(source, float(planet_type)) for source, planet_type in HARVEST_PLANET_TYPES],
    )
    conn.executemany("INSERT INTO regions VALUES (?, ?)", REGIONS)
    conn.executemany("INSERT INTO solarsystems VALUES (?, ?)", [(s[0], s[1]) for s in SYSTEMS])
    conn.executemany(
        "INSERT INTO universe VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [(s[2], s[0], s[3], *s[4:]) for s in SYSTEMS],
    )
    conn.commit()


# --- Reference fixtures ---

@pytest.fixture
def reference_conn():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    seed_reference_db(conn)
    yield conn
    conn.close()


@pytest.fixture
def reference_store(reference_conn):
    return ReferenceDataStore(reference_conn)


@pytest.fixture
def reference_cache(reference_store):
    return ReferenceCache(reference_store)


@pytest.fixture
def converter(reference_cache):
    return ColonyConverter(reference_cache)


@pytest.fixture
def resolver(reference_cache):
    with ResourceChainResolver(reference_cache, max_workers=2) as chain_resolver:
        yield chain_resolver


# --- Entity fixtures ---

MICROORGANISMS = Type(2073, "Microorganisms", 0.01)
BACTERIA = Type(2393, "Bacteria", 0.38)
PROTEINS = Type(2395, "Proteins", 0.38)
FERTILIZER = Type(3693, "Fertilizer", 1.5)
ONE_M3 = Type(1, "Crate", 1.0)


@pytest.fixture
def bacteria_schematic():
    return Schematic(
        id=126,
        cycle_time=timedelta(minutes=30),
        output_type=BACTERIA,
        output_quantity=20,
        inputs={MICROORGANISMS: 3000},
    )


@pytest.fixture
def fertilizer_schematic():
    return Schematic(
        id=70,
        cycle_time=timedelta(hours=1),
        output_type=FERTILIZER,
        output_quantity=5,
        inputs={BACTERIA: 40, PROTEINS: 40},
    )


@pytest.fixture
def make_pin():
    """Factory for pins of any kind with sensible defaults."""
    facility_types = {
        PinKind.EXTRACTOR: Type(2848, "Barren Extractor Control Unit", 0.0),
        PinKind.FACTORY: Type(2473, "Barren Basic Industry Facility", 0.0),
        PinKind.STORAGE: Type(2541, "Barren Storage Facility", 0.0),
        PinKind.LAUNCHPAD: Type(2544, "Barren Launchpad", 0.0),
        PinKind.COMMAND_CENTER: Type(2524, "Barren Command Center", 1000.0),
        PinKind.OTHER: Type(4242, "Planetary Oddity", 0.0),
    }

    def _make(pin_id, kind, details=None, contents=None, is_active=True, status=PinStatus.STATIC):
        pin_type = facility_types[kind]
        return Pin(
            id=pin_id,
            type=pin_type,
            name=pin_type.name,
            designator=f"PIN-{pin_id % 10000}",
            kind=kind,
            latitude=0.5,
            longitude=1.5,
            contents=dict(contents or {}),
            is_active=is_active,
            status=status,
            details=details,
        )

    return _make


@pytest.fixture
def set_up_extractor():
    """Extractor details with every program field present, expiring one day after NOW."""
    def _make(expiry=NOW + timedelta(days=1)):
        return ExtractorDetails(
            expiry_time=expiry,
            install_time=NOW - timedelta(days=1),
            cycle_time=timedelta(minutes=30),
            head_radius=0.01,
            heads=(),
            product_type=MICROORGANISMS,
            base_value=5000,
        )
    return _make


def route(type_, source, destination, quantity, route_id=1):
    return Route(type=type_, source_pin_id=source, destination_pin_id=destination, quantity=quantity, route_id=route_id)


# --- Snapshot fixtures ---

@pytest.fixture
def sample_snapshot():
    """A working colony: extractor -> launchpad -> factory -> launchpad, plus a command center."""
    return {
        "links": [
            {"source_pin_id": 1000000001, "destination_pin_id": 1000000004, "link_level": 0},
            {"source_pin_id": 1000000002, "destination_pin_id": 1000000004, "link_level": 1},
            {"source_pin_id": 1000000003, "destination_pin_id": 1000000004, "link_level": 0},
        ],
        "pins": [
            {
                "pin_id": 1000000001, "type_id": 2524, "latitude": 1.0, "longitude": 2.0,
                "contents": [],
            },
            {
                "pin_id": 1000000002, "type_id": 2848, "latitude": 1.1, "longitude": 2.1,
                "install_time": "2024-04-30T12:00:00Z",
                "expiry_time": "2024-05-03T12:00:00Z",
                "last_cycle_start": "2024-05-01T11:30:00Z",
                "extractor_details": {
                    "cycle_time": 1800, "head_radius": 0.0124, "product_type_id": 2073, "qty_per_cycle": 5000,
                    "heads": [
                        {"head_id": 0, "latitude": 1.11, "longitude": 2.11},
                        {"head_id": 1, "latitude": 1.12, "longitude": 2.12},
                    ],
                },
            },
            {
                "pin_id": 1000000003, "type_id": 2473, "latitude": 1.2, "longitude": 2.2,
                "schematic_id": 126,
                "last_cycle_start": "2024-05-01T11:50:00Z",
                "contents": [{"type_id": 2073, "amount": 3000}],
            },
            {
                "pin_id": 1000000004, "type_id": 2544, "latitude": 1.3, "longitude": 2.3,
                "contents": [{"type_id": 2393, "amount": 100}, {"type_id": 2073, "amount": 500}],
            },
        ],
        "routes": [
            {"route_id": 1, "source_pin_id": 1000000002, "destination_pin_id": 1000000004,
             "content_type_id": 2073, "quantity": 5000.0, "waypoints": []},
            {"route_id": 2, "source_pin_id": 1000000004, "destination_pin_id": 1000000003,
             "content_type_id": 2073, "quantity": 3000.0, "waypoints": []},
            {"route_id": 3, "source_pin_id": 1000000003, "destination_pin_id": 1000000004,
             "content_type_id": 2393, "quantity": 20.0, "waypoints": [1000000001]},
        ],
    }


@pytest.fixture
def convert_kwargs():
    return dict(
        character_id=90000001,
        planet_id=40009077,
        planet_name="Jita IV",
        planet_type="barren",
        system_id=JITA,
        system_name="Jita",
        upgrade_level=4,
        last_update="2024-05-01T11:45:00Z",
        now=NOW,
    )

