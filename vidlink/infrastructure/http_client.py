from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import aiohttp
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)


# Statuses that say the resource is definitively absent; retrying cannot help.
NON_RETRYABLE_STATUSES = frozenset({404, 410})


class HttpClientError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class HttpResponse:
    url: str
    status: int
    content_type: str | None = None
    body: bytes = b""
    truncated: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8", errors="replace"))


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Per-URL attempt policy: `max_retries` extra attempts after the first,
    sleeping backoff_base_sec * backoff_factor**n before retry n+1.
    """
    timeout_sec: float = 3.0
    max_retries: int = 2
    backoff_base_sec: float = 0.2
    backoff_factor: float = 3.0

    def wait_strategy(self) -> wait_exponential:
        return wait_exponential(multiplier=self.backoff_base_sec, exp_base=self.backoff_factor)


def _should_retry(resp: HttpResponse) -> bool:
    return not resp.ok and resp.status not in NON_RETRYABLE_STATUSES


def _log_retry(state: RetryCallState) -> None:
    outcome = state.outcome
    if outcome is None:
        return
    detail = repr(outcome.exception()) if outcome.failed else f"status {outcome.result().status}"
    sleep = state.next_action.sleep if state.next_action else 0.0
    logger.debug(
        "{} {} attempt {} failed ({}); retrying in {:.2f}s",
        state.kwargs.get("method"),
        state.args[1],
        state.attempt_number,
        detail,
        sleep,
    )


def _last_response(state: RetryCallState) -> HttpResponse | None:
    outcome = state.outcome
    if outcome is None or outcome.failed:
        return None
    return outcome.result()


class HttpFetcher(Protocol):
    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=(
                retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError))
                | retry_if_result(_should_retry)
            ),
            stop=stop_after_attempt(self._policy.max_retries + 1),
            wait=self._policy.wait_strategy(),
            before_sleep=_log_retry,
            retry_error_callback=_last_response,
        )

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        max_bytes: int | None = None,
    ) -> HttpResponse | None:
        session = self._session
        if session is None or session.closed:
            raise HttpClientError("fetcher is not started")

        limit = max_bytes if max_bytes is not None else self._max_bytes
        return await self._retrying()(
            self._attempt,
            session,
            url,
            method=method,
            headers=headers,
            max_bytes=limit,
        )

    async def _attempt(
        self,
        session: aiohttp.ClientSession,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str] | None,
        max_bytes: int,
    ) -> HttpResponse:
        timeout = aiohttp.ClientTimeout(total=self._policy.timeout_sec)

        async with session.request(
            method,
            url,
            headers=dict(headers) if headers else None,
            timeout=timeout,
            allow_redirects=True,
        ) as resp:
            body = b""
            truncated = False
            if method.upper() != "HEAD":
                chunks: list[bytes] = []
                size = 0
                async for chunk in resp.content.iter_chunked(64 * 1024):
                    chunks.append(chunk)
                    size += len(chunk)
                    if size > max_bytes:
                        truncated = True
                        break
                body = b"".join(chunks)[:max_bytes]
                if truncated:
                    logger.debug("{} body truncated at {} bytes", url, max_bytes)

            return HttpResponse(
                url=str(resp.url),
                status=resp.status,
                content_type=resp.headers.get("Content-Type"),
                body=body,
                truncated=truncated,
                headers=dict(resp.headers),
            )
