"""Error codes for CLI exit status.

Each fatal outcome of a release run maps to one of these codes so that CI
pipelines can tell a bad invocation from an unreachable control plane.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including runs with best-effort failures)
    - 1: User error (bad version string, bad flags, invalid template)
    - 2: Config error (credentials file missing or malformed)
    - 3: Resolution error (stack or domain could not be resolved)
    - 4: Remote error (control-plane call failed)
    - 5: I/O error (template file unreadable)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    RESOLUTION_ERROR = 3
    REMOTE_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
