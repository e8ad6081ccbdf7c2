"""Tests for the UseCDN orchestrator."""

import asyncio
import os
from pathlib import Path

import pytest
from conftest import make_packument

from use_cdn.core import UseCDN
from use_cdn.exceptions import (
    ConfigurationError,
    NetworkError,
    UninitializedError,
    UnsupportedCDNError,
    UnsupportedResolverError,
)
from use_cdn.resolvers import NpmVersionResolver, NullVersionResolver
from use_cdn.sessions import CdnjsSession, UnpkgSession, UnpkgVersionResolver
from use_cdn.utils.overrides import OverrideTable

PACKAGES = [
    {"package": "bootstrap", "version": "3", "files": ["dist/js/bootstrap.js"]},
    {"package": "jquery", "version": "latest", "files": [lambda v: "dist/jquery.js"]},
]


def cached_files(base: Path) -> list[str]:
    found = []
    for dirpath, _dirnames, filenames in os.walk(base):
        for name in filenames:
            found.append(Path(dirpath, name).relative_to(base).as_posix())
    return sorted(found)


def registry_config(fake_cdn, packages=PACKAGES, **extra) -> dict:
    return {
        "cdns": {"unpkg": {"url": fake_cdn.url, "resolver": "npm"}},
        "resolvers": {"npm": {"url": fake_cdn.url + "registry/"}},
        "packages": packages,
        **extra,
    }


def serve_registry(fake_cdn) -> None:
    fake_cdn.add(
        "/registry/bootstrap",
        make_packument("bootstrap", ["3.3.7", "3.4.1", "4.3.1"], latest="4.3.1"),
    )
    fake_cdn.add(
        "/registry/jquery",
        make_packument("jquery", ["2.2.4", "3.4.1"], latest="3.4.1"),
    )
    fake_cdn.add("/bootstrap@3.4.1/dist/js/bootstrap.js", "bootstrap 3.4.1")
    fake_cdn.add("/jquery@3.4.1/dist/jquery.js", "jquery 3.4.1")


@pytest.fixture
def make_use_cdn(logger, cache_root, client):
    def make(config, **kwargs) -> UseCDN:
        return UseCDN(config, logger, cache_root=cache_root, client=client, **kwargs)

    return make


@pytest.fixture
async def initialized(make_use_cdn):
    async def make(config=None, **kwargs) -> UseCDN:
        use_cdn = make_use_cdn(config if config is not None else [], **kwargs)
        await use_cdn.init()
        return use_cdn

    return make


class TestInitialization:
    async def test_methods_require_init(self, make_use_cdn) -> None:
        use_cdn = make_use_cdn([])
        with pytest.raises(UninitializedError, match="not been initialized"):
            await use_cdn.resolve()
        with pytest.raises(UninitializedError):
            use_cdn.get_session("unpkg")
        with pytest.raises(UninitializedError):
            use_cdn.get_version_resolver("npm")

    async def test_context_manager_initializes(self, make_use_cdn, cache_root) -> None:
        async with make_use_cdn([]) as use_cdn:
            assert use_cdn.initialized
            assert await use_cdn.resolve() == []
        assert (cache_root / "meta").is_file()

    async def test_invalid_config(self, make_use_cdn) -> None:
        with pytest.raises(ConfigurationError):
            make_use_cdn([{"package": "foo", "files": ["foo.js"]}])


class TestGetSession:
    async def test_is_memoized(self, initialized) -> None:
        use_cdn = await initialized()
        session = use_cdn.get_session("unpkg")
        assert isinstance(session, UnpkgSession)
        assert use_cdn.get_session("unpkg") is session
        assert use_cdn.get_session() is session

    async def test_top_level_cdn(self, initialized) -> None:
        use_cdn = await initialized({"cdn": "cdnjs"})
        assert isinstance(use_cdn.get_session(), CdnjsSession)

    async def test_unsupported_cdn(self, initialized) -> None:
        use_cdn = await initialized()
        with pytest.raises(UnsupportedCDNError, match="unsupported cdn: jsdelivr"):
            use_cdn.get_session("jsdelivr")

    async def test_default_resolvers(self, initialized) -> None:
        use_cdn = await initialized()
        assert isinstance(use_cdn.get_session("unpkg").resolver, UnpkgVersionResolver)
        assert isinstance(use_cdn.get_session("cdnjs").resolver, NpmVersionResolver)

    async def test_explicit_resolver(self, initialized) -> None:
        use_cdn = await initialized({"cdns": {"unpkg": {"resolver": "npm"}}})
        resolver = use_cdn.get_session("unpkg").resolver
        assert isinstance(resolver, NpmVersionResolver)
        assert use_cdn.get_version_resolver("npm") is resolver

    async def test_native_resolver(self, initialized) -> None:
        use_cdn = await initialized(
            {"cdns": {"unpkg": {"url": "http://mirror/", "resolver": "native"}}}
        )
        resolver = use_cdn.get_session("unpkg").resolver
        assert isinstance(resolver, UnpkgVersionResolver)
        assert resolver.make_package_url("foo", "latest") == "http://mirror/foo@latest"

    async def test_native_resolver_requires_one(self, initialized) -> None:
        use_cdn = await initialized({"cdns": {"cdnjs": {"resolver": "native"}}})
        with pytest.raises(UnsupportedResolverError):
            use_cdn.get_session("cdnjs")

    async def test_session_name_as_resolver(self, initialized) -> None:
        use_cdn = await initialized({"cdns": {"cdnjs": {"resolver": "unpkg"}}})
        with pytest.raises(ConfigurationError) as excinfo:
            use_cdn.get_session("cdnjs")
        assert str(excinfo.value) == (
            "you may not use a session name as a resolver name, to\n"
            'specify the resolver native to a session, use "native"'
        )

    async def test_unknown_resolver(self, initialized) -> None:
        use_cdn = await initialized({"cdns": {"unpkg": {"resolver": "bower"}}})
        with pytest.raises(UnsupportedResolverError, match="bower"):
            use_cdn.get_session("unpkg")


class TestGetVersionResolver:
    async def test_is_memoized(self, initialized) -> None:
        use_cdn = await initialized()
        resolver = use_cdn.get_version_resolver("null")
        assert isinstance(resolver, NullVersionResolver)
        assert use_cdn.get_version_resolver("null") is resolver

    async def test_default_is_npm(self, initialized) -> None:
        use_cdn = await initialized({"resolvers": {"npm": {"url": "http://reg"}}})
        resolver = use_cdn.get_version_resolver()
        assert isinstance(resolver, NpmVersionResolver)
        assert resolver.make_package_url("jquery") == "http://reg/jquery"

    async def test_cdn_name_designates_native(self, initialized) -> None:
        use_cdn = await initialized()
        resolver = use_cdn.get_version_resolver("unpkg")
        assert isinstance(resolver, UnpkgVersionResolver)
        assert use_cdn.get_session("unpkg").resolver is resolver

    async def test_unsupported(self, initialized) -> None:
        use_cdn = await initialized()
        with pytest.raises(UnsupportedResolverError, match="unsupported resolver: x"):
            use_cdn.get_version_resolver("x")


class TestResolve:
    async def test_end_to_end(self, initialized, fake_cdn, cache_root) -> None:
        serve_registry(fake_cdn)
        use_cdn = await initialized(registry_config(fake_cdn))

        paths = await use_cdn.resolve()

        base = cache_root / "cache"
        assert paths == [
            base / "bootstrap" / "3.4.1" / "dist" / "js" / "bootstrap.js",
            base / "jquery" / "3.4.1" / "dist" / "jquery.js",
        ]
        assert cached_files(base) == [
            "bootstrap/3.4.1/dist/js/bootstrap.js",
            "jquery/3.4.1/dist/jquery.js",
        ]
        assert os.readlink(base / "jquery" / "latest") == "3.4.1"
        assert not os.path.lexists(base / "bootstrap" / "3")

    async def test_second_run_is_cached(self, initialized, fake_cdn) -> None:
        serve_registry(fake_cdn)
        config = registry_config(fake_cdn)
        first = await (await initialized(config)).resolve()
        second = await (await initialized(config)).resolve()
        assert first == second
        assert fake_cdn.hits["/jquery@3.4.1/dist/jquery.js"] == 1

    async def test_overrides(self, initialized, fake_cdn, cache_root) -> None:
        serve_registry(fake_cdn)
        fake_cdn.add("/jquery@2.2.4/dist/jquery.js", "jquery 2.2.4")
        use_cdn = await initialized(
            registry_config(fake_cdn),
            overrides=OverrideTable({"jquery": "2"}),
        )

        paths = await use_cdn.resolve()

        assert paths[1] == cache_root / "cache" / "jquery" / "2.2.4" / "dist/jquery.js"
        assert paths[1].read_text() == "jquery 2.2.4"
        assert fake_cdn.hits["/jquery@3.4.1/dist/jquery.js"] == 0

    async def test_native_unpkg(self, initialized, fake_cdn, cache_root) -> None:
        fake_cdn.redirect("/foo@latest", "/foo@1.0.0/index.js")
        fake_cdn.add("/foo@1.0.0/foo.js", "foo")
        use_cdn = await initialized(
            {
                "cdns": {"unpkg": {"url": fake_cdn.url}},
                "packages": [
                    {"package": "foo", "version": "latest", "files": ["foo.js"]}
                ],
            }
        )

        assert await use_cdn.resolve() == [
            cache_root / "cache" / "foo" / "1.0.0" / "foo.js"
        ]
        assert os.readlink(cache_root / "cache" / "foo" / "latest") == "1.0.0"

    async def test_package_cdn(self, initialized, fake_cdn, cache_root) -> None:
        serve_registry(fake_cdn)
        fake_cdn.add("/ajax/libs/jquery/3.4.1/jquery.js", "jquery from cdnjs")
        config = registry_config(
            fake_cdn,
            packages=[
                {
                    "package": "jquery",
                    "cdn": "cdnjs",
                    "version": "latest",
                    "files": ["jquery.js"],
                }
            ],
            cdn="unpkg",
        )
        config["cdns"]["cdnjs"] = {"url": fake_cdn.url, "resolver": "npm"}
        use_cdn = await initialized(config)

        [path] = await use_cdn.resolve()
        assert path.read_text() == "jquery from cdnjs"

    async def test_siblings_of_a_failure_complete(
        self, initialized, fake_cdn, cache_root
    ) -> None:
        fake_cdn.add("/foo@1.0.0/foo.js", "foo")
        fake_cdn.delays["/foo@1.0.0/foo.js"] = 0.2
        use_cdn = await initialized(
            {
                "cdns": {"unpkg": {"url": fake_cdn.url, "resolver": "null"}},
                "packages": [
                    {"package": "bad", "version": "1.0.0", "files": ["bad.js"]},
                    {"package": "foo", "version": "1.0.0", "files": ["foo.js"]},
                ],
            }
        )

        with pytest.raises(NetworkError, match="404"):
            await use_cdn.resolve()

        foo = cache_root / "cache" / "foo" / "1.0.0" / "foo.js"
        for _ in range(100):
            if foo.exists():
                break
            await asyncio.sleep(0.05)
        assert foo.read_text() == "foo"
        assert not (cache_root / "cache" / "bad").exists()

    async def test_first_failure_is_raised(self, initialized, fake_cdn) -> None:
        serve_registry(fake_cdn)
        packages = PACKAGES + [
            {"package": "missing", "version": "1.0.0", "files": ["missing.js"]}
        ]
        use_cdn = await initialized(registry_config(fake_cdn, packages=packages))
        with pytest.raises(NetworkError, match="404"):
            await use_cdn.resolve()
