from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from fcr.template.model import PathConfig


ReleaseMode = Literal["stable", "snapshot"]
EvictionPolicy = Literal["snapshot-first", "chronological"]

EVICTION_POLICIES: tuple[EvictionPolicy, ...] = ("snapshot-first", "chronological")

# Sorts before any real timestamp; used when the platform sends an unreadable time.
EPOCH_MIN = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Derived once per run from the release version; read-only afterwards."""

    version: str  # without leading "v"; used as description/tag on the platform
    qualifier: str
    mode: ReleaseMode
    # Stable qualifier of the same major.minor.patch (snapshot mode only).
    prev_qualifier: str | None = None

    @property
    def is_snapshot(self) -> bool:
        return self.mode == "snapshot"


@dataclass(frozen=True, slots=True)
class VersionRecord:
    version_id: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class AliasRecord:
    name: str
    version_id: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class TriggerRecord:
    name: str
    trigger_type: str
    qualifier: str | None
    created: datetime
    modified: datetime

    @property
    def is_http(self) -> bool:
        return self.trigger_type.lower() == "http"


@dataclass(frozen=True, slots=True)
class TriggerSpec:
    """An HTTP trigger as it will be created on the platform."""

    name: str
    qualifier: str
    auth_type: str
    methods: tuple[str, ...]
    description: str


@dataclass(frozen=True, slots=True)
class DomainRecord:
    domain_name: str
    protocol: str
    routes: tuple[PathConfig, ...]


@dataclass(frozen=True, slots=True)
class ProvisionRecord:
    resource: str  # <account>#<service>#<qualifier>#<function>
    target: int
    current: int


@dataclass(frozen=True, slots=True)
class StackRecord:
    stack_id: str
    stack_name: str


def parse_remote_time(value: str | None) -> datetime:
    """Parse a platform timestamp; unreadable values sort first."""
    if not value:
        return EPOCH_MIN
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return EPOCH_MIN
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
