"""Exit codes for the relwatch CLI.

Only fatal paths exit non-zero. A tag or pull request that cannot be read
is reported as a warning and never changes the exit code on its own.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1  # unknown --repo name
    CONFIG_ERROR = 2  # unreadable config, missing token, bad repository URL
    GIT_ERROR = 3  # mirror cannot be cloned, fetched or read
    NETWORK_ERROR = 4  # GitHub API unreachable
    INTERNAL_ERROR = 5  # a report pipeline raised
