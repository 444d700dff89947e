"""Process exit codes for the tagpub CLI.

The CI runner only sees the exit status of a release, so these values are
the pipeline's externally visible pass/fail signal and must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: every publish step succeeded
    - 1: user error (tag does not qualify, bad arguments)
    - 2: configuration error (bad release.toml, missing credential)
    - 3: a publish step failed
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    PUBLISH_ERROR = 3

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
