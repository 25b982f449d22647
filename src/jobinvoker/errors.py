"""Failure taxonomy for job invocations.

Every failure along the resolve -> overlay -> bind -> run path is raised as one
of the InvocationError subclasses below. The original exception, when there is
one, is chained as ``__cause__`` and also kept on ``cause``.
"""

from __future__ import annotations

from typing import ClassVar

from jobinvoker.models import ConfigError, ErrorKind

__all__ = [
    "CapabilityError",
    "ConfigurationError",
    "ConstructionError",
    "ContextLoadError",
    "ExecutionError",
    "InvocationError",
    "ResolutionError",
]


class InvocationError(Exception):
    """Base exception for all invocation failures."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ConfigurationError(InvocationError):
    """Raised when a required startup input is missing or invalid."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        errors: list[ConfigError] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.errors = errors or []
        if self.errors:
            details = [f"{e.path}: {e.message}" for e in self.errors]
            message = message + ":\n" + "\n".join(details)
        super().__init__(message, cause)


class ResolutionError(InvocationError):
    """Raised when no job implementation is registered under a name."""

    kind: ClassVar[ErrorKind] = ErrorKind.RESOLUTION


class ConstructionError(InvocationError):
    """Raised when a job's zero-argument construction fails."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONSTRUCTION


class CapabilityError(InvocationError):
    """Raised when a constructed job lacks a context map or entry point."""

    kind: ClassVar[ErrorKind] = ErrorKind.CAPABILITY

    def __init__(self, message: str, missing: list[str], cause: BaseException | None = None) -> None:
        self.missing = missing
        super().__init__(message, cause)


class ContextLoadError(InvocationError):
    """Raised when a configuration source exists but cannot be read or parsed."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONTEXT_LOAD

    def __init__(self, message: str, source: str, cause: BaseException | None = None) -> None:
        self.source = source
        super().__init__(message, cause)


class ExecutionError(InvocationError):
    """Raised when the job's entry point raised."""

    kind: ClassVar[ErrorKind] = ErrorKind.EXECUTION

    def __init__(self, message: str, job_name: str, cause: BaseException | None = None) -> None:
        self.job_name = job_name
        super().__init__(message, cause)
