"""
Per-package version overrides, usually read from the ``USE_CDN_OVERRIDES``
environment variable.
"""

import logging
import os
from collections.abc import Mapping

from use_cdn.exceptions import ConfigurationError

log = logging.getLogger(__name__)

OVERRIDES_ENV_VAR = "USE_CDN_OVERRIDES"


class OverrideTable:
    """
    Maps package names to the version or tag that must be used instead of the
    one declared in the configuration.
    """

    def __init__(self, overrides: Mapping[str, str] | None = None):
        self._overrides: dict[str, str] = dict(overrides or {})

    @classmethod
    def parse(cls, text: str) -> "OverrideTable":
        """
        Parses a whitespace-separated list of ``<package>@<version-or-tag>``
        items. ``"foo@1 bar@latest"`` overrides ``foo`` to ``1`` and ``bar`` to
        ``latest``.
        """
        overrides: dict[str, str] = {}
        for part in text.split():
            pkg, *rest = part.split("@")
            if not rest:
                raise ConfigurationError(
                    f"package {pkg} overriden without a version specification"
                )
            if len(rest) > 1:
                raise ConfigurationError(
                    f"the setting {part} in the environment override is malformed"
                )
            overrides[pkg] = rest[0]
        return cls(overrides)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "OverrideTable":
        """Builds a table from ``USE_CDN_OVERRIDES``, empty if the variable is unset."""
        environ = os.environ if environ is None else environ
        table = cls.parse(environ.get(OVERRIDES_ENV_VAR, ""))
        if table:
            log.debug(f"Version overrides in effect: {table.as_dict()}")
        return table

    def apply(self, package: str, version_or_tag: str) -> str:
        """Returns the overriding version for ``package``, or ``version_or_tag``."""
        return self._overrides.get(package, version_or_tag)

    def as_dict(self) -> dict[str, str]:
        return dict(self._overrides)

    def __bool__(self) -> bool:
        return bool(self._overrides)

    def __len__(self) -> int:
        return len(self._overrides)
