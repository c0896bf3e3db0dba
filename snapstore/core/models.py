from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union

from snapstore.core.exceptions import ConfigError


class LocationMode(str, Enum):
    """Read-routing preference between an account's primary and secondary endpoints."""

    PRIMARY_ONLY = "primary_only"
    SECONDARY_ONLY = "secondary_only"
    PRIMARY_THEN_SECONDARY = "primary_then_secondary"

    @classmethod
    def parse(cls, value: Union[str, "LocationMode", None]) -> "LocationMode":
        """
        Resolves a location mode from its name.

        Matching is case-insensitive and accepts '-', '_' or spaces between
        words, so "primary-then-secondary" and "PRIMARY_THEN_SECONDARY" are
        the same mode. ``None`` or an empty string selects PRIMARY_ONLY.

        Raises:
            ConfigError: If the value is not a recognized mode.
        """
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.PRIMARY_ONLY
        token = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        for mode in cls:
            if mode.value == token:
                return mode
        allowed = ", ".join(m.value for m in cls)
        raise ConfigError(
            f"location mode [{value}] is not a recognized mode (expected one of: {allowed})"
        )

    @property
    def reads_primary_first(self) -> bool:
        return self in (LocationMode.PRIMARY_ONLY, LocationMode.PRIMARY_THEN_SECONDARY)

    @property
    def has_fallback(self) -> bool:
        return self is LocationMode.PRIMARY_THEN_SECONDARY


@dataclass(frozen=True)
class BlobMetadata:
    """Name (relative to the listed key path) and size of a stored blob."""

    name: str
    length: int


@dataclass(frozen=True)
class BlobPath:
    """Immutable hierarchical path inside a container."""

    segments: Tuple[str, ...] = ()

    @classmethod
    def of(cls, *segments: str) -> "BlobPath":
        return cls(tuple(segments))

    @classmethod
    def parse(cls, raw: str) -> "BlobPath":
        """Splits a '/'-delimited string, dropping empty segments."""
        return cls(tuple(seg for seg in (raw or "").split("/") if seg))

    def add(self, segment: str) -> "BlobPath":
        return BlobPath(self.segments + (segment,))

    def extend(self, segments: Iterable[str]) -> "BlobPath":
        return BlobPath(self.segments + tuple(segments))

    def build_as_string(self, separator: str = "/") -> str:
        return separator.join(self.segments)

    def key_prefix(self) -> str:
        """Joined path with a trailing '/', or '' for the root path."""
        key_path = self.build_as_string("/")
        if key_path:
            key_path += "/"
        return key_path

    def __str__(self) -> str:
        return "[" + "][".join(self.segments) + "]" if self.segments else "[]"


__all__ = ["LocationMode", "BlobMetadata", "BlobPath"]
