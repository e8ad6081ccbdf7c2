"""Shared fixtures: an in-process fake CDN/registry and a fresh cache."""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from pathlib import Path
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from use_cdn.api.client import CDNClient
from use_cdn.storage.cache import WritableCache


class FakeLogger:
    """Logger collaborator recording debug messages."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def debug(self, message: str) -> None:
        self.messages.append(message)


class FakeCDN:
    """Serves canned responses keyed by request path and counts hits."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any, dict[str, str]]] = {}
        self.hits: Counter[str] = Counter()
        self.delays: dict[str, float] = {}
        self.url = ""

    def add(
        self,
        path: str,
        body: Any = b"",
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[path] = (status, body, headers or {})

    def redirect(self, path: str, location: str, status: int = 302) -> None:
        self.add(path, status=status, headers={"Location": location})

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.hits[request.path] += 1
        if request.path in self.delays:
            await asyncio.sleep(self.delays[request.path])
        if request.path not in self.routes:
            return web.Response(status=404, text="not found")
        status, body, headers = self.routes[request.path]
        if isinstance(body, (dict, list)):
            return web.Response(
                status=status,
                text=json.dumps(body),
                content_type="application/json",
                headers=headers,
            )
        if isinstance(body, str):
            body = body.encode("utf-8")
        return web.Response(status=status, body=body, headers=headers)


def make_packument(name: str, versions: list[str], **dist_tags: str) -> dict:
    return {
        "name": name,
        "dist-tags": dist_tags,
        "versions": {v: {"name": name, "version": v} for v in versions},
    }


@pytest.fixture
async def fake_cdn():
    cdn = FakeCDN()
    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", cdn.handle)
    server = TestServer(app)
    await server.start_server()
    cdn.url = str(server.make_url("/"))
    try:
        yield cdn
    finally:
        await server.close()


@pytest.fixture
async def client():
    cdn_client = CDNClient()
    try:
        yield cdn_client
    finally:
        await cdn_client.close()


@pytest.fixture
def logger() -> FakeLogger:
    return FakeLogger()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / ".use-cdn"


@pytest.fixture
async def cache(cache_root: Path) -> WritableCache:
    writable = WritableCache(cache_root)
    await writable.init()
    return writable
