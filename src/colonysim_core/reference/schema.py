# src/colonysim_core/reference/schema.py
"""
DDL for the subset of the static game data the engine reads.

Production deployments point the ReferenceDataStore at an existing static-data
database that already contains these tables; `create_reference_schema` exists to
build fresh databases for fixtures and tooling.
"""
import sqlite3

REFERENCE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS types (
    type_id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    volume REAL,
    groupID INTEGER,
    marketGroupID INTEGER,
    icon_filename TEXT
);

CREATE TABLE IF NOT EXISTS planetSchematics (
    schematic_id INTEGER PRIMARY KEY,
    output_typeid INTEGER NOT NULL,
    name TEXT,
    cycle_time INTEGER NOT NULL,
    output_value INTEGER NOT NULL,
    input_typeid TEXT NOT NULL,
    input_value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS planetResourceHarvest (
    typeid INTEGER NOT NULL,
    harvest_typeid INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS typeAttributes (
    type_id INTEGER NOT NULL,
    attribute_id INTEGER NOT NULL,
    value REAL
);

CREATE TABLE IF NOT EXISTS regions (
    regionID INTEGER PRIMARY KEY,
    regionName TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS solarsystems (
    solarSystemID INTEGER PRIMARY KEY,
    solarSystemName TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS universe (
    region_id INTEGER NOT NULL,
    solarsystem_id INTEGER PRIMARY KEY,
    system_security REAL,
    temperate INTEGER DEFAULT 0,
    barren INTEGER DEFAULT 0,
    oceanic INTEGER DEFAULT 0,
    ice INTEGER DEFAULT 0,
    gas INTEGER DEFAULT 0,
    lava INTEGER DEFAULT 0,
    storm INTEGER DEFAULT 0,
    plasma INTEGER DEFAULT 0
);
"""


def create_reference_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(REFERENCE_SCHEMA_SQL)
