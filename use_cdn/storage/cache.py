"""
The on-disk cache of package files.

Two adapters share the path computations of ``use_cdn.storage.paths``:
``WritableCache`` is asynchronous and used while resolving, ``SyncReadableCache``
is synchronous and read-only, for consumers that cannot await.
"""

import asyncio
import json
import logging
import os
import shutil
import uuid
from pathlib import Path

import aiofiles
import semantic_version

from use_cdn.exceptions import (
    CacheMissError,
    CacheUnreadableError,
    TagNotAllowedError,
    UninitializedError,
    UnsupportedCacheVersionError,
)
from use_cdn.utils.versions import is_tag

from . import paths

log = logging.getLogger(__name__)


class BaseCache:
    """Path computations and metadata reading common to both cache adapters."""

    def __init__(self, root: Path | str | None = None):
        self.data_path = paths.data_path(root)
        self.cache_base_path = paths.cache_base_path(root)
        self.meta_path = paths.meta_path(root)

    def make_package_path(self, package: str, version_or_tag: str) -> Path:
        return paths.package_path(self.data_path, package, version_or_tag)

    def make_file_path(self, package: str, version_or_tag: str, file: str) -> Path:
        return paths.file_path(self.data_path, package, version_or_tag, file)

    def _read_meta_version(self) -> int:
        """Reads the schema version stored in the metadata file."""
        try:
            meta = json.loads(self.meta_path.read_text(encoding="utf-8"))
            version = meta["version"]
        except (OSError, ValueError, TypeError, KeyError) as e:
            raise CacheUnreadableError(f"cannot read {self.meta_path}") from e

        if isinstance(version, bool) or not isinstance(version, int):
            raise CacheUnreadableError(
                f"cannot read {self.meta_path}: invalid version {version!r}"
            )
        return version


class WritableCache(BaseCache):
    """
    Asynchronous, read-write model of the on-disk cache.

    Caveats:

    - Concurrent writes from multiple processes are not supported.
    - Concurrent calls to ``set`` from the same process are fine.
    - Concurrent calls to ``link`` from the same process are fine as long as
      they target different ``(package, tag)`` pairs.
    """

    def __init__(self, root: Path | str | None = None):
        super().__init__(root)
        self.initialized = False

    async def init(self) -> None:
        """
        Initializes the cache. Must be called before any other method.

        Creates the cache if it does not exist, rebuilds it from scratch if it
        uses an older format, and refuses to touch it if it uses a newer one.

        Raises:
            CacheUnreadableError: If the directory exists but has no readable
            metadata.
            UnsupportedCacheVersionError: If the cache comes from a newer
            release.
        """
        if not await asyncio.to_thread(self.data_path.exists):
            log.debug(f"Creating cache at {self.data_path}")
            await self._create_cache()
        else:
            try:
                version = await asyncio.to_thread(self._read_meta_version)
            except CacheUnreadableError as e:
                raise CacheUnreadableError(
                    f"{e}; we're assuming that {self.data_path} is not a use-cdn "
                    "directory: move the data somewhere else or delete it"
                ) from e.__cause__

            if version < paths.CURRENT_CACHE_VERSION:
                log.info(
                    f"Cache at {self.data_path} uses format {version}, "
                    f"rebuilding it for format {paths.CURRENT_CACHE_VERSION}."
                )
                await asyncio.to_thread(shutil.rmtree, self.data_path)
                await self._create_cache()
            elif version > paths.CURRENT_CACHE_VERSION:
                raise UnsupportedCacheVersionError(
                    f"the version number stored in {self.meta_path} is greater "
                    "than the version we support"
                )

        self.initialized = True

    def assert_initialized(self) -> None:
        if not self.initialized:
            raise UninitializedError("the cache has not been initialized")

    async def _create_cache(self) -> None:
        await asyncio.to_thread(
            self.cache_base_path.mkdir, parents=True, exist_ok=True
        )
        async with aiofiles.open(self.meta_path, "w", encoding="utf-8") as f:
            await f.write(
                json.dumps({"version": paths.CURRENT_CACHE_VERSION}, indent=2)
            )

    async def set(
        self, package: str, version: str, file: str, content: bytes | str
    ) -> Path:
        """
        Stores the content of a file and returns the path where it was stored.

        Raises:
            TagNotAllowedError: If ``version`` is a tag. Content is only ever
            stored under concrete versions.
        """
        self.assert_initialized()
        if is_tag(version):
            raise TagNotAllowedError(
                f"set called with tag {version!r} for {package}, which is not allowed"
            )

        if isinstance(content, str):
            content = content.encode("utf-8")

        file_path = self.make_file_path(package, version, file)
        await asyncio.to_thread(file_path.parent.mkdir, parents=True, exist_ok=True)
        # Readers only ever see complete files.
        temp_path = file_path.with_name(f".{file_path.name}.{uuid.uuid4().hex}.part")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(content)
            await asyncio.to_thread(os.replace, temp_path, file_path)
        finally:
            await asyncio.to_thread(temp_path.unlink, missing_ok=True)
        return file_path

    async def get_path(
        self, package: str, version_or_tag: str, file: str
    ) -> Path | None:
        """Returns the path of a cached file, or ``None`` if it is not cached."""
        self.assert_initialized()
        file_path = self.make_file_path(package, version_or_tag, file)
        if await asyncio.to_thread(file_path.exists):
            return file_path
        return None

    async def link(self, package: str, version: str, tag: str) -> None:
        """
        Records that ``tag`` resolves to ``version``, replacing any previous
        record for the same tag.

        Raises:
            UnsafePathError: If the version would point the link outside the
            package.
        """
        self.assert_initialized()
        self.make_package_path(package, version)
        tag_path = self.make_package_path(package, tag)
        await asyncio.to_thread(_replace_link, tag_path, version)
        log.debug(f"Linked {package}@{tag} to {version}")

    async def read_link(self, package: str, tag: str) -> str | None:
        """Returns the version a tag was last resolved to, if any."""
        self.assert_initialized()
        tag_path = self.make_package_path(package, tag)
        if not await asyncio.to_thread(tag_path.is_symlink):
            return None
        return await asyncio.to_thread(os.readlink, tag_path)


def _replace_link(tag_path: Path, version: str) -> None:
    # Not atomic: a crash between removal and creation leaves no link, which
    # the next resolution recreates.
    if tag_path.is_symlink() or tag_path.is_file():
        tag_path.unlink()
    elif tag_path.exists():
        shutil.rmtree(tag_path)
    tag_path.parent.mkdir(parents=True, exist_ok=True)
    tag_path.symlink_to(version, target_is_directory=True)


class SyncReadableCache(BaseCache):
    """
    Synchronous, read-only model of the on-disk cache.

    Meant for test-runner integrations that must enumerate cached files
    without running an event loop.
    """

    def __init__(self, root: Path | str | None = None):
        """
        Raises:
            CacheUnreadableError: If the metadata cannot be read.
            UnsupportedCacheVersionError: If the cache is not in the current
            format.
        """
        super().__init__(root)
        if self._read_meta_version() != paths.CURRENT_CACHE_VERSION:
            raise UnsupportedCacheVersionError("the use-cdn data is not up to date")

    def get_path(self, package: str, version_or_tag: str, file: str) -> Path:
        """
        Returns the path of a cached file.

        Raises:
            CacheMissError: If the file is not in the cache.
        """
        file_path = self.make_file_path(package, version_or_tag, file)
        if not file_path.exists():
            raise CacheMissError(f"{file_path} is not in the cache")
        return file_path

    def resolve_to_version(self, package: str, version_or_tag: str) -> str:
        """
        Returns the version a tag resolved to during the last resolution run.
        If the path is a plain directory, ``version_or_tag`` is already a
        version and is returned as-is. A partial version such as ``3`` is
        never linked, so it resolves to the highest cached version it
        matches as an npm range.

        Raises:
            CacheMissError: If nothing was ever resolved for this pair, which
            means the configuration was not resolved before reading it.
        """
        package_path = self.make_package_path(package, version_or_tag)
        if package_path.is_symlink():
            return os.readlink(package_path)
        if package_path.exists():
            return version_or_tag

        if not is_tag(version_or_tag):
            match = self._highest_cached_match(package, version_or_tag)
            if match is not None:
                return match

        raise CacheMissError(
            f"{package}@{version_or_tag} has not been resolved into the cache"
        )

    def _highest_cached_match(self, package: str, version_range: str) -> str | None:
        """
        Picks the highest cached version satisfying ``version_range``. The
        registry may have chosen a lower one (its ``latest`` when that
        satisfies the range), so when an earlier run cached a higher match
        this answer can differ from what the last resolution fetched.
        """
        try:
            spec = semantic_version.NpmSpec(version_range)
        except ValueError:
            return None

        package_dir = self.cache_base_path / package
        if not package_dir.is_dir():
            return None

        candidates: dict[semantic_version.Version, str] = {}
        for entry in package_dir.iterdir():
            if entry.is_symlink() or not entry.is_dir():
                continue
            try:
                candidates[semantic_version.Version(entry.name)] = entry.name
            except ValueError:
                continue

        best = spec.select(candidates)
        return candidates[best] if best is not None else None
