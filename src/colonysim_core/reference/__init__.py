# src/colonysim_core/reference/__init__.py
"""
Exposes the public interface of the reference data package.
"""
from .records import ResourceLevel, ResourceInfo, TypeInfo, SystemInfo, SchematicRecord
from .exceptions import ReferenceQueryError
from .store import ReferenceDataStore, connect_reference_db
from .schema import create_reference_schema
from .cache import ReferenceCache, parse_id_list

__all__ = [
    "ResourceLevel",
    "ResourceInfo",
    "TypeInfo",
    "SystemInfo",
    "SchematicRecord",
    "ReferenceQueryError",
    "ReferenceDataStore",
    "connect_reference_db",
    "create_reference_schema",
    "ReferenceCache",
    "parse_id_list",
]
