"""
Pure computation of the locations used by the on-disk cache.

Layout under a cache root::

    <root>/meta                                 {"version": <int>}
    <root>/cache/<package>/<version>/<file...>  content
    <root>/cache/<package>/<tag>                symlink to the sibling <version>
"""

import os
from pathlib import Path

from use_cdn.exceptions import UnsafePathError

CURRENT_CACHE_VERSION = 1
DEFAULT_DATA_DIR = ".use-cdn"


def data_path(root: Path | str | None = None) -> Path:
    """Returns the absolute cache root, ``./.use-cdn`` when ``root`` is not given."""
    return Path(root if root is not None else DEFAULT_DATA_DIR).resolve()


def cache_base_path(root: Path | str | None = None) -> Path:
    return data_path(root) / "cache"


def meta_path(root: Path | str | None = None) -> Path:
    return data_path(root) / "meta"


def package_path(root: Path | str | None, package: str, version_or_tag: str) -> Path:
    """
    Computes where a package version lives in the cache. For instance the
    package ``fnord`` version ``2`` lives at ``<root>/cache/fnord/2``.

    Raises:
        UnsafePathError: If the package or version would lead outside
        ``<root>/cache/<package>``.
    """
    base = cache_base_path(root)
    package_dir = _contained(base, base / package, package)
    return _contained(package_dir, package_dir / version_or_tag, version_or_tag)


def file_path(
    root: Path | str | None, package: str, version_or_tag: str, file: str
) -> Path:
    """
    Computes where a file of a package version lives in the cache, e.g. the
    file ``foo/bar.js`` of ``fnord`` version ``2`` lives at
    ``<root>/cache/fnord/2/foo/bar.js``.
    """
    version_dir = package_path(root, package, version_or_tag)
    return _contained(version_dir, version_dir / file, file)


def _contained(parent: Path, path: Path, part: str) -> Path:
    # Lexical only: tag links are symlinks and stay unresolved.
    normalized = Path(os.path.normpath(path))
    escapes = normalized != path or not normalized.is_relative_to(parent)
    if escapes or normalized == parent:
        raise UnsafePathError(f"{part!r} leads outside of {parent}")
    return path
