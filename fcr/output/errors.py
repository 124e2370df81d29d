"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fcr.core.config import ConfigError
from fcr.core.errors import ErrorCode
from fcr.output.console import Style
from fcr.services.release.errors import (
    DomainNotFound,
    InvalidVersion,
    ReleaseError,
    RemoteOperationError,
    ResolutionError,
)
from fcr.template.decode import TemplateError

if TYPE_CHECKING:
    from fcr.output.console import ConsoleProtocol

__all__ = [
    "print_release_error",
    "release_error_exit_code",
    "print_config_error",
    "print_template_error",
    "template_error_exit_code",
]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print release error to console with appropriate formatting."""
    match error:
        case InvalidVersion(version=version, reason=reason):
            console.error(f"invalid release version {version!r}: {reason}")
        case ResolutionError(name=name, reason=reason, hint=hint):
            console.error(f"cannot resolve {name}: {reason}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case DomainNotFound(domain_name=domain_name, hint=hint):
            console.error(f"custom domain not found: {domain_name}")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case RemoteOperationError(operation=operation, message=message, code=code):
            suffix = f" [{code}]" if code else ""
            console.error(f"{operation} failed{suffix}: {message}")


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error:
        case InvalidVersion():
            return int(ErrorCode.USER_ERROR)
        case ResolutionError() | DomainNotFound():
            return int(ErrorCode.RESOLUTION_ERROR)
        case RemoteOperationError():
            return int(ErrorCode.REMOTE_ERROR)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    console.print("hint: run `fun config` or pass -c/--config", Style.DIM)


def print_template_error(error: TemplateError, console: ConsoleProtocol) -> None:
    console.error(f"invalid template: {error.pretty()}" if not error.unreadable else error.pretty())


def template_error_exit_code(error: TemplateError) -> int:
    if error.unreadable:
        return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.USER_ERROR)
