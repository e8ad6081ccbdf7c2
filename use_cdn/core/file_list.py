"""
Synchronous enumeration of already cached files, for test-runner integrations
that cannot run an event loop.
"""

import logging
from pathlib import Path
from typing import Any

from use_cdn.models.config import UseCDNConfig, expand_file
from use_cdn.storage.cache import SyncReadableCache
from use_cdn.utils.overrides import OverrideTable
from use_cdn.utils.versions import is_tag

log = logging.getLogger(__name__)


def get_file_list(
    config: UseCDNConfig | dict[str, Any] | list[Any],
    logger: Any = None,
    *,
    cache_root: Path | str | None = None,
    overrides: OverrideTable | None = None,
) -> list[Path]:
    """
    Lists the cached files of a configuration that was already resolved.

    Args:
        config: The configuration that was passed to ``UseCDN``.
        logger: Logger collaborator exposing ``debug``.
        cache_root: The cache directory. Defaults to ``./.use-cdn``.
        overrides: The version overrides in effect when resolving.

    Returns:
        The cached paths, in the order packages and files are declared.

    Raises:
        CacheMissError: If a file is not cached, meaning the configuration
        was not resolved first.
    """
    config = UseCDNConfig.from_raw(config)
    logger = logger if logger is not None else logging.getLogger("use_cdn")
    overrides = overrides if overrides is not None else OverrideTable()
    cache = SyncReadableCache(cache_root)

    paths: list[Path] = []
    for spec in config.packages:
        version = overrides.apply(spec.package, spec.version)
        # Tags are linked under the name used for resolution.
        lookup = (spec.resolve_as or spec.package) if is_tag(version) else spec.package
        resolved_version = cache.resolve_to_version(lookup, version)

        for file in spec.files:
            file = expand_file(file, resolved_version)
            path = cache.get_path(spec.package, resolved_version, file)
            logger.debug(f"adding file {path}")
            paths.append(path)

    return paths
