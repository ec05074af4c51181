"""
Pytest configuration and fixtures for dead letter archive tests

This module provides shared fixtures for unit and integration tests.
"""
import pytest

from dead_letter_archive.config.settings import ArchiveConfig
from fakes import EXECUTION_ARN, InMemoryObjectStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run the whole archive flow against in-memory collaborators"
    )


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def archive_config() -> ArchiveConfig:
    """Archive config pointing at a test bucket and stack"""
    return ArchiveConfig(system_bucket="test-internal", stack_name="test-stack")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove archive environment variables for the duration of a test"""
    for name in (
        "system_bucket",
        "stackName",
        "DLA_ARCHIVE_SUBPATH",
        "DLA_MAX_UNWRAP_DEPTH",
        "DLA_INVOCATION_TIMEOUT",
        "DLA_MIGRATION_CONCURRENCY",
        "AWS_REGION",
    ):
        # setenv first so values loaded during the test (dotenv) are undone
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


# =======================
# COLLABORATOR FIXTURES
# =======================

@pytest.fixture
def object_store() -> InMemoryObjectStore:
    """Empty in-memory object store"""
    return InMemoryObjectStore()


@pytest.fixture
def execution_arn() -> str:
    return EXECUTION_ARN
