"""
Integration tests for migrating legacy dead letter archive objects.
"""

import asyncio

import pytest

from dead_letter_archive.archive.keys import is_date_partitioned
from dead_letter_archive.archive.migration import DeadLetterArchiveMigrator
from dead_letter_archive.archive.writer import DeadLetterArchiveWriter
from fakes import (
    EXECUTION_ARN,
    InMemoryObjectStore,
    StubResolver,
    make_execution_event,
    make_workflow_message,
    wrap_sqs,
)

PREFIX = "test-stack/dead-letter-archive/sqs"


def make_migrator(config, store):
    resolver = StubResolver({EXECUTION_ARN: make_workflow_message(granule_ids=["G1"])})
    writer = DeadLetterArchiveWriter(config, store, resolver)
    return DeadLetterArchiveMigrator(writer, store)


@pytest.mark.integration
def test_legacy_objects_moved_into_partitions(archive_config, object_store):
    """Test legacy objects are re-hoisted, written under a date and deleted."""
    object_store.objects[f"{PREFIX}/legacy-1.json"] = wrap_sqs(make_execution_event(), error="x")
    object_store.objects[f"{PREFIX}/legacy-2.json"] = {"opaque": True}

    result = asyncio.run(make_migrator(archive_config, object_store).migrate())

    assert result.summary() == {"migrated": 2, "failed": 0, "skipped": 0}
    assert sorted(object_store.deleted) == [f"{PREFIX}/legacy-1.json", f"{PREFIX}/legacy-2.json"]
    new_key = result.migrated[f"{PREFIX}/legacy-1.json"]
    assert new_key.startswith(f"{PREFIX}/2024-03-21/{EXECUTION_ARN}-")
    assert object_store.objects[new_key]["collectionId"] == "MOD09___006"
    assert all(is_date_partitioned(key, PREFIX) for key in object_store.objects)


@pytest.mark.integration
def test_partitioned_objects_left_alone(archive_config, object_store):
    """Test already partitioned objects are not listed for migration."""
    partitioned = f"{PREFIX}/2024-03-21/{EXECUTION_ARN}-t.json"
    object_store.objects[partitioned] = {"already": "migrated"}
    object_store.objects[f"{PREFIX}/notes.txt"] = {"not": "json"}

    result = asyncio.run(make_migrator(archive_config, object_store).migrate())

    assert result.migrated == {}
    assert result.skipped == [f"{PREFIX}/notes.txt"]
    assert object_store.objects[partitioned] == {"already": "migrated"}
    assert object_store.deleted == []


@pytest.mark.integration
def test_failures_reported_not_raised(archive_config):
    """Test a failed write keeps the legacy object and is reported."""
    store = InMemoryObjectStore(fail_when=lambda key, doc: doc.get("poison") is True)
    store.objects[f"{PREFIX}/good.json"] = {"fine": True}
    store.objects[f"{PREFIX}/bad.json"] = {"poison": True}

    result = asyncio.run(make_migrator(archive_config, store).migrate())

    assert list(result.failed) == [f"{PREFIX}/bad.json"]
    assert list(result.migrated) == [f"{PREFIX}/good.json"]
    assert store.objects[f"{PREFIX}/bad.json"] == {"poison": True}
    assert store.deleted == [f"{PREFIX}/good.json"]


@pytest.mark.integration
def test_limit(archive_config, object_store):
    for i in range(5):
        object_store.objects[f"{PREFIX}/legacy-{i}.json"] = {"n": i}

    result = asyncio.run(make_migrator(archive_config, object_store).migrate(limit=2))

    assert len(result.migrated) == 2
    assert len(object_store.deleted) == 2


@pytest.mark.integration
def test_result_is_serializable(archive_config, object_store):
    """Test the migration result dumps to plain JSON for reporting."""
    object_store.objects[f"{PREFIX}/legacy.json"] = {"opaque": True}

    result = asyncio.run(make_migrator(archive_config, object_store).migrate())

    dumped = result.model_dump()
    assert list(dumped["migrated"]) == [f"{PREFIX}/legacy.json"]
    assert dumped["failed"] == {}
    assert dumped["skipped"] == []
