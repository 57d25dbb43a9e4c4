"""Polling of asynchronous bulk jobs on the Terminology Store."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import BulkJobFailed, JobTimeout, RemoteCallFailed
from .schema import JobStatusPayload

if TYPE_CHECKING:
    from mapsync.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 0.8


class JobStatus(StrEnum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SCHEDULED = "SCHEDULED"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> JobStatus:
        """Match a reported status case-insensitively; anything unknown is non-terminal."""

        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


async def wait_for_job(
    client: ResilientClient,
    url: str,
    *,
    interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    deadline: float | None = None,
) -> JobStatusPayload:
    """Poll ``url`` every ``interval`` seconds until the job reaches a terminal state.

    Returns the final job payload on ``COMPLETED`` and raises ``BulkJobFailed``
    on ``FAILED``. With a ``deadline`` the wait is bounded and ``JobTimeout`` is
    raised when it expires. Cancelling the awaiting task stops the poll.
    """

    if deadline is None:
        return await _poll(client, url, interval)
    try:
        async with asyncio.timeout(deadline):
            return await _poll(client, url, interval)
    except TimeoutError as exc:
        raise JobTimeout(url, deadline) from exc


async def _poll(client: ResilientClient, url: str, interval: float) -> JobStatusPayload:
    attempt = 0
    while True:
        await asyncio.sleep(interval)
        attempt += 1
        response = await client.get(url)
        if not response.is_success:
            raise RemoteCallFailed(url, response.status_code, response.text)
        payload = JobStatusPayload.model_validate(response.json())
        status = JobStatus.parse(payload.status)
        log.debug("Job %s poll %d: %s", url, attempt, payload.status)
        if status is JobStatus.COMPLETED:
            return payload
        if status is JobStatus.FAILED:
            raise BulkJobFailed(url, payload.message)
