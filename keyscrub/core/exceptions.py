# keyscrub/core/exceptions.py

"""Custom exception hierarchy for keyscrub.

This module defines the error types used throughout the application to
separate configuration problems, per-file input failures, and internal
correctness bugs in the key table machinery.
"""


class ScrubError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigurationError(ScrubError):
    """Raised when indicator, ignore list, or banner configuration is invalid.

    Always raised at load time, before any file is scouted.
    """

    pass


class InputError(ScrubError):
    """Raised when a single file cannot be read, decoded, or written.

    Scoped to one file's task; the orchestrator records it and carries on
    with the remaining files.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class InvariantViolation(ScrubError):
    """Raised when a key table would lose placeholder or value uniqueness.

    This indicates a bug in the key naming or merge logic, never a user
    condition. The orchestrator lets it propagate unwrapped; only the
    scrub_files entry point turns it into a failed run report.
    """

    pass


class PipelineError(ScrubError):
    """Raised when a processing step in the pipeline fails unexpectedly."""

    pass
