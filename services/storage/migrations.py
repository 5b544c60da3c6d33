# services/storage/migrations.py

import copy
import logging
from enum import IntEnum
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

LEGACY_MASTER_KEYS = ("master_circular_2023", "master_circular_2024")


class InvalidSchemaError(ValueError):
    """Raised when a document matches none of the known schema versions"""


class SchemaVersion(IntEnum):
    # flat master_circular_2023 / master_circular_2024 keys, master circulars only
    LEGACY = 1
    # master_circulars + normal_circulars
    CURRENT = 2


def detect_schema_version(raw: Any) -> SchemaVersion:
    """
    Work out which schema a raw decoded document follows.

    Args:
        raw: Decoded JSON value

    Returns:
        The matching SchemaVersion

    Raises:
        InvalidSchemaError: If the value is not a recognised document
    """
    if not isinstance(raw, dict):
        raise InvalidSchemaError(
            f"Expected a JSON object, got {type(raw).__name__}"
        )
    if isinstance(raw.get("master_circulars"), dict):
        return SchemaVersion.CURRENT
    if raw.get("master_circular_2023") is not None and "master_circulars" not in raw:
        return SchemaVersion.LEGACY
    raise InvalidSchemaError("Invalid data structure")


def migrate_v1_to_v2(raw: Dict[str, Any]) -> Dict[str, Any]:
    empty = {"content": [], "annexures": []}
    return {
        "master_circulars": {
            key: copy.deepcopy(raw.get(key) or empty) for key in LEGACY_MASTER_KEYS
        },
        "normal_circulars": {},
    }


# Each entry upgrades a document by exactly one version.
MIGRATIONS: Dict[SchemaVersion, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    SchemaVersion.LEGACY: migrate_v1_to_v2,
}


def migrate_to_current(raw: Any) -> Dict[str, Any]:
    """Apply migrations until the document reaches SchemaVersion.CURRENT"""
    version = detect_schema_version(raw)
    document = raw
    while version < SchemaVersion.CURRENT:
        migration = MIGRATIONS.get(version)
        if migration is None:
            raise InvalidSchemaError(f"No migration registered for schema v{int(version)}")
        logger.info(f"Migrating circulars document from schema v{int(version)}")
        document = migration(document)
        version = SchemaVersion(version + 1)

    if not isinstance(document.get("normal_circulars"), dict):
        document = dict(document)
        document["normal_circulars"] = {}
    return document
