"""Release reconciliation: versions, aliases, triggers, routes and capacity."""

from fcr.services.release.errors import (
    DomainNotFound,
    InvalidVersion,
    ReleaseError,
    RemoteOperationError,
    ResolutionError,
)
from fcr.services.release.model import ReleaseContext
from fcr.services.release.qualifier import derive_release_context
from fcr.services.release.resolver import ServiceNameResolver
from fcr.services.release.service import ReleaseOptions, ReleaseReport, reconcile_release

__all__ = [
    "DomainNotFound",
    "InvalidVersion",
    "ReleaseContext",
    "ReleaseError",
    "ReleaseOptions",
    "ReleaseReport",
    "RemoteOperationError",
    "ResolutionError",
    "ServiceNameResolver",
    "derive_release_context",
    "reconcile_release",
]
