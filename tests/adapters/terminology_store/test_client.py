"""Terminology Store client against an in-process fake of the HTTP API."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from uuid import UUID

import pytest

from mapsync.adapters.terminology_store import (
    BulkJobFailed,
    MissingJobHandle,
    RemoteCallFailed,
)
from mapsync.domain.ports import MutationContext
from tests.helpers.mappings import BRANCH, SOURCE_CODE, make_entry, make_project
from tests.helpers.terminology_store import BASE_URL, store_member

if TYPE_CHECKING:
    from mapsync.adapters.terminology_store import TerminologyStoreClient
    from tests.helpers.terminology_store import FakeStoreServer, StorePayload

MEMBERS_URL = f"{BASE_URL}{BRANCH}/members"


def _context() -> MutationContext:
    return MutationContext(project=make_project(), source_code=SOURCE_CODE)


def test_fetch_members_sends_filters_and_parses_page(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.seed(store_member("m1"), store_member("m2", active=False))

    page = store_client.fetch_members(
        BRANCH,
        refset_id="447562003",
        referenced_component_id=SOURCE_CODE,
        module_id="51000202101",
    )

    [request] = store_server.requests
    assert request.url.path == f"/snowstorm/{BRANCH}/members"
    assert dict(request.url.params) == {
        "referenceSet": "447562003",
        "referencedComponentId": SOURCE_CODE,
        "limit": "50",
        "module": "51000202101",
        "active": "true",
    }
    assert [member.member_id for member in page.items] == ["m1"]
    assert page.items[0].additional_fields.map_group == 1
    assert page.total == 1


def test_fetch_members_without_active_filter_returns_every_state(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.seed(store_member("m1"), store_member("m2", active=False))

    page = store_client.fetch_members(
        BRANCH, refset_id="447562003", referenced_component_id=SOURCE_CODE, active_only=False
    )

    assert "active" not in store_server.requests[0].url.params
    assert "module" not in store_server.requests[0].url.params
    assert [member.member_id for member in page.items] == ["m1", "m2"]


def test_create_single_posts_member_owned_by_project_module(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    entry = make_entry(
        "X40", advices=["FIFTH CHARACTER REQUIRED", "ALWAYS X40"], module_id="449080006"
    )

    created = store_client.create_single(_context(), entry)

    [request] = store_server.requests_for("POST")
    body: StorePayload = json.loads(request.content)
    assert str(request.url) == MEMBERS_URL
    assert UUID(str(body["memberId"]))
    assert body["moduleId"] == "51000202101"
    assert body["released"] is False
    assert body["effectiveTime"] == ""
    assert body["refsetId"] == "447562003"
    assert body["referencedComponentId"] == SOURCE_CODE
    assert body["additionalFields"] == {
        "mapCategoryId": "447637006",
        "mapRule": "TRUE",
        "mapAdvice": "ALWAYS X40 | FIFTH CHARACTER REQUIRED",
        "mapPriority": 1,
        "mapGroup": 1,
        "correlationId": "447561005",
        "mapTarget": "X40",
    }
    assert created.member_id == body["memberId"]
    assert created.module_id == "51000202101"
    assert created.advices == frozenset({"ALWAYS X40", "FIFTH CHARACTER REQUIRED"})


def test_update_single_puts_to_member_resource(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.seed(store_member("m1", released=True))

    updated = store_client.update_single(
        _context(), make_entry("X40", member_id="m1", released=True, active=False)
    )

    [request] = store_server.requests_for("PUT")
    assert str(request.url) == f"{MEMBERS_URL}/m1"
    assert json.loads(request.content)["active"] is False
    assert updated.member_id == "m1"
    assert updated.active is False


def test_create_bulk_waits_for_job_and_reads_members_back(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    entries = [make_entry("X40"), make_entry("Y10", group=2, member_id="fixed-id")]

    created = store_client.create_bulk(_context(), entries)

    [bulk] = store_server.requests_for("POST", "/members/bulk")
    posted = json.loads(bulk.content)
    assert [member["additionalFields"]["mapTarget"] for member in posted] == ["X40", "Y10"]
    assert posted[1]["memberId"] == "fixed-id"
    assert len(store_server.requests_for("GET", "/members/bulk/bulk-1")) == 2
    assert [entry.member_id for entry in created] == [posted[0]["memberId"], "fixed-id"]
    assert [entry.to_code for entry in created] == ["X40", "Y10"]


def test_bulk_without_job_location_is_rejected(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.send_job_location = False

    with pytest.raises(MissingJobHandle):
        store_client.update_bulk(_context(), [make_entry("X40"), make_entry("Y10", group=2)])

    assert store_server.requests_for("GET") == []


def test_failed_bulk_job_raises(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.job_statuses = ["FAILED"]
    store_server.job_message = "mapTarget is required"

    with pytest.raises(BulkJobFailed, match="mapTarget is required"):
        store_client.create_bulk(_context(), [make_entry("X40"), make_entry("Y10", group=2)])


def test_delete_bulk_sends_member_ids_with_force(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.seed(store_member("m1"), store_member("m2", group=2))

    store_client.delete_bulk(
        _context(), [make_entry("X40", member_id="m1"), make_entry("X40", member_id="m2")]
    )

    [request] = store_server.requests_for("DELETE")
    assert request.url.params["force"] == "true"
    assert json.loads(request.content) == {"memberIds": ["m1", "m2"]}
    assert store_server.members == {}


def test_delete_bulk_without_member_ids_sends_nothing(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_client.delete_bulk(_context(), [make_entry("X40")])

    assert store_server.requests == []


def test_failed_call_reports_url_status_and_reason(
    store_client: TerminologyStoreClient, store_server: FakeStoreServer
) -> None:
    store_server.fail_status = 409

    with pytest.raises(RemoteCallFailed) as exc:
        store_client.create_single(_context(), make_entry("X40"))

    assert exc.value.status == 409
    assert str(exc.value) == (
        f"Call to URL '{MEMBERS_URL}' wasn't successful. Status: 409 Message: Branch is locked"
    )


def test_fetch_concept_returns_first_item_or_none(
    store_client: TerminologyStoreClient,
    store_server: FakeStoreServer,
    concepts_page_payload: StorePayload,
) -> None:
    [item] = concepts_page_payload["items"]  # type: ignore[misc]
    store_server.concepts["447637006"] = item

    found = store_client.fetch_concept("SNOMEDCT", "2023-01-31", "447637006")
    missing = store_client.fetch_concept("SNOMEDCT", "2023-01-31", "999")

    request = store_server.requests[0]
    assert request.url.path == "/snowstorm/MAIN/SNOMEDCT/2023-01-31/concepts"
    assert request.url.params["activeFilter"] == "true"
    assert found is not None
    assert found.preferred_name == "Map source concept is properly classified"
    assert missing is None
