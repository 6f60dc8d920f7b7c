import asyncio
from typing import Any, Mapping

import pytest

from vidlink.infrastructure.http_client import HttpResponse


class FakeFetcher:
    """
    In-process stand-in for AiohttpFetcher.

    Unknown URLs behave like a dead network (None). Routes are keyed by
    (method, url); method "*" matches any method.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.headers_seen: dict[str, Mapping[str, str] | None] = {}

    def add(
        self,
        url: str,
        *,
        status: int = 200,
        body: bytes | str = b"",
        content_type: str | None = None,
        method: str = "*",
        delay: float = 0.0,
        truncated: bool = False,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._routes[(method, url)] = {
            "status": status,
            "body": body,
            "content_type": content_type,
            "delay": delay,
            "truncated": truncated,
        }

    def add_json(self, url: str, payload: str, *, status: int = 200) -> None:
        self.add(url, status=status, body=payload, content_type="application/json")

    def called(self, url: str) -> bool:
        return any(u == url for _, u in self.calls)

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        max_bytes: int | None = None,
    ) -> HttpResponse | None:
        self.calls.append((method, url))
        self.headers_seen[url] = headers

        route = self._routes.get((method, url)) or self._routes.get(("*", url))
        if route is None:
            return None
        if route["delay"]:
            await asyncio.sleep(route["delay"])

        body = route["body"] if method != "HEAD" else b""
        return HttpResponse(
            url=url,
            status=route["status"],
            content_type=route["content_type"],
            body=body,
            truncated=route["truncated"],
        )


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
