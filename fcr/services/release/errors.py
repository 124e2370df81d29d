from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class InvalidVersion:
    version: str
    reason: str


@dataclass(frozen=True, slots=True)
class ResolutionError:
    name: str
    reason: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class DomainNotFound:
    domain_name: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RemoteOperationError:
    """A control-plane or stack call that did not succeed."""

    operation: str
    message: str
    code: str | None = None


ReleaseError = InvalidVersion | ResolutionError | DomainNotFound | RemoteOperationError
