"""Shared fixtures for Terminology Store adapter tests."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import pytest

from mapsync.adapters.http_resilience import ResilientClient
from mapsync.adapters.terminology_store import TerminologyStoreClient
from mapsync.config import JobPollingConfig, build_terminology_store_config
from tests.helpers.terminology_store import BASE_URL, FakeStoreServer, StorePayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from mapsync.config import ResilienceConfig, TerminologyStoreConfig

FIXTURES = Path("tests/data/terminology_store")


def _load_fixture(name: str) -> StorePayload:
    return json.loads((FIXTURES / name).read_text())


@pytest.fixture
def members_page_payload() -> StorePayload:
    return _load_fixture("members_page.json")


@pytest.fixture
def concepts_page_payload() -> StorePayload:
    return _load_fixture("concepts_page.json")


@pytest.fixture
def store_config() -> TerminologyStoreConfig:
    config = build_terminology_store_config(
        BASE_URL,
        polling=JobPollingConfig(interval_seconds=0.0, deadline_seconds=5.0),
    )
    return replace(config, concepts=replace(config.concepts, cache=None))


@pytest.fixture
def store_server() -> FakeStoreServer:
    return FakeStoreServer()


@pytest.fixture
def resilient_client_factory(
    store_server: FakeStoreServer,
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=httpx.MockTransport(store_server))

    return factory


@pytest.fixture
def store_client(
    store_config: TerminologyStoreConfig,
    resilient_client_factory: Callable[[ResilienceConfig], ResilientClient],
) -> TerminologyStoreClient:
    return TerminologyStoreClient(config=store_config, client_factory=resilient_client_factory)
