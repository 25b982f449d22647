"""Core types and dataclasses for job-invoker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, BinaryIO

__all__ = [
    "INPUT_STREAM_KEY",
    "INVOCATION_CONTEXT_KEY",
    "OUTPUT_STREAM_KEY",
    "ConfigError",
    "ErrorKind",
    "HostBindings",
    "JobDescriptor",
]

INPUT_STREAM_KEY = "inputStream"
OUTPUT_STREAM_KEY = "outputStream"
INVOCATION_CONTEXT_KEY = "invocationContext"


class ErrorKind(StrEnum):
    """Step of the invocation path that produced a failure."""

    CONFIGURATION = "configuration"
    RESOLUTION = "resolution"
    CONSTRUCTION = "construction"
    CAPABILITY = "capability"
    CONTEXT_LOAD = "context_load"
    EXECUTION = "execution"


@dataclass(frozen=True)
class JobDescriptor:
    """Identifies which registered job implementation to run."""

    logical_name: str


@dataclass(frozen=True)
class HostBindings:
    """Values supplied by the host for a single invocation.

    The engine only passes the streams through; the host owns and closes them.
    """

    input_stream: BinaryIO | None
    output_stream: BinaryIO | None
    invocation_metadata: Any = None

    def as_context(self) -> dict[str, Any]:
        """Return the bindings under their fixed context keys."""
        return {
            INPUT_STREAM_KEY: self.input_stream,
            OUTPUT_STREAM_KEY: self.output_stream,
            INVOCATION_CONTEXT_KEY: self.invocation_metadata,
        }


@dataclass(frozen=True)
class ConfigError:
    """A single problem found while validating startup configuration."""

    path: str  # Dotted path to the invalid value, or the source locator
    message: str
