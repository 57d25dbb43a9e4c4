"""Terminology Store API client for refset members, concepts and bulk jobs."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from mapsync.adapters.http_resilience import ResilientClient

from .errors import MissingJobHandle, RemoteCallFailed
from .jobs import wait_for_job
from .schema import ConceptItem, ConceptPage, MemberPage, RefsetMember
from .translator import member_payload, serialize_member, translate_member

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import httpx

    from mapsync.config.http_resilience import ResilienceConfig
    from mapsync.config.terminology import TerminologyStoreConfig
    from mapsync.domain.model import MapEntry
    from mapsync.domain.ports import MutationContext

log = getLogger(__name__)


def members_path(branch: str) -> str:
    return f"{branch.strip('/')}/members"


def concepts_branch(terminology: str, version: str) -> str:
    return f"MAIN/{terminology}/{version}"


class TerminologyStoreClient:
    """HTTP client for the Terminology Store member and concept endpoints.

    Every public method is a blocking facade over one async exchange. Member
    reads and writes go through an uncached client; concept lookups use a
    separate cached one.
    """

    def __init__(
        self,
        *,
        config: TerminologyStoreConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    # reads

    def fetch_members(
        self,
        branch: str,
        *,
        refset_id: str,
        referenced_component_id: str,
        module_id: str | None = None,
        active_only: bool = True,
        search_after: str | None = None,
    ) -> MemberPage:
        params: dict[str, str] = {
            "referenceSet": refset_id,
            "referencedComponentId": referenced_component_id,
            "limit": str(self._config.member_page_size),
        }
        if module_id is not None:
            params["module"] = module_id
        if active_only:
            params["active"] = "true"
        if search_after is not None:
            params["searchAfter"] = search_after
        return asyncio.run(self._fetch_members_async(branch, params))

    def fetch_concept(self, terminology: str, version: str, code: str) -> ConceptItem | None:
        return asyncio.run(self._fetch_concept_async(terminology, version, code))

    # writes

    def create_single(self, context: MutationContext, entry: MapEntry) -> MapEntry:
        return asyncio.run(self._write_single_async(context, entry, update=False))

    def update_single(self, context: MutationContext, entry: MapEntry) -> MapEntry:
        return asyncio.run(self._write_single_async(context, entry, update=True))

    def create_bulk(self, context: MutationContext, entries: Sequence[MapEntry]) -> list[MapEntry]:
        return asyncio.run(self._write_bulk_async(context, entries))

    def update_bulk(self, context: MutationContext, entries: Sequence[MapEntry]) -> list[MapEntry]:
        return asyncio.run(self._write_bulk_async(context, entries))

    def delete_bulk(self, context: MutationContext, entries: Sequence[MapEntry]) -> None:
        member_ids = [entry.member_id for entry in entries if entry.member_id]
        if not member_ids:
            return
        asyncio.run(self._delete_async(context.branch, member_ids))

    async def _fetch_members_async(self, branch: str, params: dict[str, str]) -> MemberPage:
        path = members_path(branch)
        async with self._client_factory(self._resilience) as client:
            response = await client.get(path, params=params)
            _ensure_success(response)
            return MemberPage.model_validate(response.json())

    async def _fetch_concept_async(
        self, terminology: str, version: str, code: str
    ) -> ConceptItem | None:
        path = f"{concepts_branch(terminology, version)}/concepts"
        params = {"activeFilter": "true", "conceptIds": code}
        async with self._client_factory(self._config.concepts) as client:
            response = await client.get(path, params=params)
            _ensure_success(response)
            page = ConceptPage.model_validate(response.json())
        if not page.items:
            log.debug("Concept %s not found on %s", code, concepts_branch(terminology, version))
            return None
        return page.items[0]

    async def _write_single_async(
        self, context: MutationContext, entry: MapEntry, *, update: bool
    ) -> MapEntry:
        payload = member_payload(context, entry)
        body = serialize_member(payload)
        async with self._client_factory(self._resilience) as client:
            if update:
                path = f"{members_path(context.branch)}/{payload.member_id}"
                response = await client.put(path, json=body)
            else:
                path = members_path(context.branch)
                response = await client.post(path, json=body)
            _ensure_success(response)
        return translate_member(RefsetMember.model_validate(response.json()))

    async def _write_bulk_async(
        self, context: MutationContext, entries: Sequence[MapEntry]
    ) -> list[MapEntry]:
        payloads = [member_payload(context, entry) for entry in entries]
        path = f"{members_path(context.branch)}/bulk"
        polling = self._config.polling
        async with self._client_factory(self._resilience) as client:
            response = await client.post(path, json=[serialize_member(p) for p in payloads])
            _ensure_success(response)
            job_url = response.headers.get("Location")
            if not job_url:
                raise MissingJobHandle(path)
            log.info("Submitted bulk job %s with %d member(s)", job_url, len(payloads))
            await wait_for_job(
                client,
                job_url,
                interval=polling.interval_seconds,
                deadline=polling.deadline_seconds,
            )
            written: list[MapEntry] = []
            for payload in payloads:
                member = await self._read_member(client, context.branch, payload.member_id)
                written.append(translate_member(member))
        return written

    async def _delete_async(self, branch: str, member_ids: list[str]) -> None:
        path = members_path(branch)
        async with self._client_factory(self._resilience) as client:
            response = await client.delete(
                path, params={"force": "true"}, json={"memberIds": member_ids}
            )
            _ensure_success(response)
        log.info("Deleted %d member(s) on %s", len(member_ids), branch)

    async def _read_member(
        self, client: ResilientClient, branch: str, member_id: str
    ) -> RefsetMember:
        path = f"{members_path(branch)}/{member_id}"
        response = await client.get(path)
        _ensure_success(response)
        return RefsetMember.model_validate(response.json())


def _ensure_success(response: httpx.Response) -> None:
    if not response.is_success:
        raise RemoteCallFailed(str(response.request.url), response.status_code, response.text)
