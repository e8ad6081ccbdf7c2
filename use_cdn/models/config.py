"""
Pydantic models for the use-cdn configuration.
Provides robust validation for all settings.
"""

from collections.abc import Callable, Sequence
from typing import Any, Union

from pathvalidate import ValidationError as PathValidationError
from pathvalidate import validate_filepath
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from use_cdn.exceptions import ConfigurationError

FileSpec = Union[str, Callable[[str], str]]


class CDNConfig(BaseModel):
    """Settings of one CDN."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    url: str | None = None
    resolver: str | None = None


class ResolverConfig(BaseModel):
    """Settings of one version resolver."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    url: str | None = None


class PackageConfig(BaseModel):
    """A package to fetch and the files it contributes."""

    model_config = ConfigDict(
        extra="forbid", populate_by_name=True, str_strip_whitespace=True
    )

    package: str = Field(min_length=1)
    cdn: str | None = None
    resolve_as: str | None = Field(default=None, alias="resolveAs")
    version: str = Field(min_length=1)
    files: list[Any] = Field(min_length=1)

    @field_validator("package", "resolve_as")
    @classmethod
    def validate_package(cls, v: str | None) -> str | None:
        if v is not None:
            validate_package_name(v)
        return v

    @field_validator("files")
    @classmethod
    def validate_files(cls, v: list[Any]) -> list[Any]:
        """
        Each file is either a path relative to the package root or a callable
        that takes the resolved version and returns such a path.
        """
        for file in v:
            if callable(file):
                continue
            if not isinstance(file, str):
                raise ValueError(f"value is not a file: {file!r}")
            validate_file_path(file)
        return v


class UseCDNConfig(BaseModel):
    """A validated configuration for use-cdn."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    cdn: str | None = None
    cdns: dict[str, CDNConfig] = Field(default_factory=dict)
    resolvers: dict[str, ResolverConfig] = Field(default_factory=dict)
    packages: list[PackageConfig] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> "UseCDNConfig":
        """
        Validates a raw configuration. A bare sequence of package entries is
        accepted as a shorthand for ``{"packages": [...]}``.

        Raises:
            ConfigurationError: If validation fails.
        """
        if isinstance(raw, cls):
            return raw
        try:
            if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
                return cls(packages=list(raw))
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e


def validate_file_path(file: str) -> None:
    """
    Ensures ``file`` is a usable path relative to a package root.

    Raises:
        ValueError: If the path is empty, absolute, climbs out of the package,
        or contains characters that cannot be stored on disk.
    """
    if not file:
        raise ValueError("file path cannot be empty")
    if file.startswith(("/", "\\")) or ".." in file.replace("\\", "/").split("/"):
        raise ValueError(
            f"file path {file!r} cannot contain relative '..' or absolute paths"
        )
    try:
        validate_filepath(file, platform="auto")
    except PathValidationError as e:
        raise ValueError(f"invalid file path {file!r}: {e}") from e


def validate_package_name(name: str) -> None:
    """
    Ensures ``name`` is a plain package name or a scoped ``@scope/name``.

    Raises:
        ValueError: If the name is absolute, has more segments than a scoped
        name, or has empty, ``.`` or ``..`` segments.
    """
    parts = name.split("/")
    if len(parts) > 2 or (len(parts) == 2 and not name.startswith("@")):
        raise ValueError(f"invalid package name {name!r}")
    if "\\" in name or any(part in ("", ".", "..") for part in parts):
        raise ValueError(f"invalid package name {name!r}")


def expand_file(file: FileSpec, version: str) -> str:
    """
    Returns the path ``file`` designates in ``version`` of a package, calling
    it when it is a function of the version.

    Raises:
        ConfigurationError: If the function does not return a usable path.
    """
    if not callable(file):
        return file
    path = file(version)
    if not isinstance(path, str):
        raise ConfigurationError(
            f"file function returned {path!r} for version {version}, not a path"
        )
    try:
        validate_file_path(path)
    except ValueError as e:
        raise ConfigurationError(
            f"file function returned an unusable path for version {version}: {e}"
        ) from e
    return path
