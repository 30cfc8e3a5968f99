"""Shared fixtures: in-memory cluster and app stores."""

from __future__ import annotations

import pytest

from kotsreporting.cluster.objects import NodeInfo
from kotsreporting.models.config import ReportingConfig
from tests.fakes import FakeAppStore, InMemoryObjectStore


@pytest.fixture
def objects() -> InMemoryObjectStore:
    return InMemoryObjectStore(
        nodes=[
            NodeInfo(name="node-a", provider_id="", labels={}, ready=True),
            NodeInfo(name="node-b", provider_id="", labels={}, ready=False),
        ],
    )


@pytest.fixture
def app_store() -> FakeAppStore:
    return FakeAppStore()


@pytest.fixture
def reporting_config() -> ReportingConfig:
    return ReportingConfig(namespace="kots", kots_version="1.109.0")
