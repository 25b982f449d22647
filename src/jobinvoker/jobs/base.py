"""Contract every job implementation satisfies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any, BinaryIO, ClassVar, Protocol, runtime_checkable

from jobinvoker.context import ContextStore
from jobinvoker.models import INPUT_STREAM_KEY, INVOCATION_CONTEXT_KEY, OUTPUT_STREAM_KEY


@runtime_checkable
class HasContextMap(Protocol):
    """Exposes the mutable context the job reads its parameters from."""

    context_map: MutableMapping[str, Any]


@runtime_checkable
class Runnable(Protocol):
    """Exposes an entry point that takes nothing beyond the shared context."""

    def run_job(self) -> None: ...


class Job(ABC):
    """Convenience base class for jobs.

    Jobs do not have to inherit from this class; the invoker only relies on a
    ``context_map`` mapping and a ``run_job()`` method. Subclasses may populate
    defaults in ``__init__`` (via ``DEFAULT_CONTEXT`` or directly); configuration
    sources and host bindings are layered on top before ``run_job()`` is called.
    """

    name: ClassVar[str]
    DEFAULT_CONTEXT: ClassVar[dict[str, Any]] = {}

    def __init__(self) -> None:
        self.context_map: ContextStore = ContextStore(self.DEFAULT_CONTEXT, origin=f"{type(self).__name__}:defaults")

    @abstractmethod
    def run_job(self) -> None:
        """Execute job logic.

        Raises:
            Exception: Any exception is reported to the host as an ExecutionError
        """
        ...

    @property
    def input_stream(self) -> BinaryIO | None:
        return self.context_map.get(INPUT_STREAM_KEY)

    @property
    def output_stream(self) -> BinaryIO | None:
        return self.context_map.get(OUTPUT_STREAM_KEY)

    @property
    def invocation_context(self) -> Any:
        return self.context_map.get(INVOCATION_CONTEXT_KEY)
