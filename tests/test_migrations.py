# tests/test_migrations.py
import pytest

from services.storage.migrations import (
    MIGRATIONS,
    InvalidSchemaError,
    SchemaVersion,
    detect_schema_version,
    migrate_to_current,
)

LEGACY = {
    "master_circular_2023": {"content": [{"chapter_number": "1"}], "annexures": []},
    "master_circular_2024": {"content": [], "annexures": [{"annexure_title": "A"}]},
}


def test_detects_current_schema():
    doc = {"master_circulars": {}, "normal_circulars": {}}
    assert detect_schema_version(doc) == SchemaVersion.CURRENT


def test_detects_legacy_schema():
    assert detect_schema_version(LEGACY) == SchemaVersion.LEGACY


@pytest.mark.parametrize("raw", [None, [], "text", 3, {}, {"normal_circulars": {}}])
def test_rejects_unknown_shapes(raw):
    with pytest.raises(InvalidSchemaError):
        detect_schema_version(raw)


def test_every_old_version_has_a_migration():
    for version in SchemaVersion:
        if version < SchemaVersion.CURRENT:
            assert version in MIGRATIONS


def test_legacy_migration_moves_master_keys():
    migrated = migrate_to_current(LEGACY)
    assert migrated == {
        "master_circulars": {
            "master_circular_2023": LEGACY["master_circular_2023"],
            "master_circular_2024": LEGACY["master_circular_2024"],
        },
        "normal_circulars": {},
    }


def test_legacy_migration_does_not_alias_input():
    migrated = migrate_to_current(LEGACY)
    migrated["master_circulars"]["master_circular_2023"]["content"].append({"chapter_number": "2"})
    assert len(LEGACY["master_circular_2023"]["content"]) == 1


def test_legacy_without_2024_gets_empty_circular():
    migrated = migrate_to_current({"master_circular_2023": {"content": [], "annexures": []}})
    assert migrated["master_circulars"]["master_circular_2024"] == {"content": [], "annexures": []}


def test_current_without_normal_circulars_is_completed():
    migrated = migrate_to_current({"master_circulars": {}})
    assert migrated["normal_circulars"] == {}
