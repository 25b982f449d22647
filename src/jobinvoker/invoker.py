"""Drive one job invocation from name to finished entry point."""

from __future__ import annotations

import sys
from collections.abc import MutableMapping, Sequence
from typing import Any

from jobinvoker.context import ContextStore
from jobinvoker.errors import ExecutionError
from jobinvoker.logger import get_logger
from jobinvoker.models import HostBindings, JobDescriptor
from jobinvoker.overlay import ConfigOverlay
from jobinvoker.resolver import JobResolver

__all__ = ["HOST_ORIGIN", "Invoker"]

# Origin recorded in a ContextStore for host-injected keys
HOST_ORIGIN = "host"

logger = get_logger(__name__)


class Invoker:
    """Runs exactly one job per call, in a fixed sequence of steps.

    1. resolve and construct the job
    2. take the context map the job owns
    3. overlay the configuration sources onto it
    4. inject the host bindings, overwriting anything the sources set
    5. call the job's entry point
    6. report an entry point failure as ExecutionError

    No retries, no timeouts; the host decides what happens to a run that
    takes too long.
    """

    def __init__(
        self,
        resolver: JobResolver | None = None,
        overlay: ConfigOverlay | None = None,
    ) -> None:
        self._resolver = resolver or JobResolver()
        self._overlay = overlay or ConfigOverlay()

    def run(
        self,
        descriptor: JobDescriptor,
        sources: Sequence[str] | None,
        bindings: HostBindings,
    ) -> None:
        """Resolve, prepare and run the job named by ``descriptor``.

        Raises:
            InvocationError: The subclass identifies the failing step
        """
        name = descriptor.logical_name
        log = logger.bind(job=name)

        job = self._resolver.resolve(name)
        context: MutableMapping[str, Any] = job.context_map

        self._overlay.merge_into(context, sources, anchor=_anchor_package(job))
        _inject(context, bindings)
        log.debug("Context prepared", keys=len(context), sources=list(sources or []))

        log.info("Invoking job", job_class=f"{type(job).__module__}.{type(job).__qualname__}")
        try:
            job.run_job()
        except Exception as e:
            raise ExecutionError(f"Job '{name}' failed: {e}", job_name=name, cause=e) from e
        log.info("Job completed")


def _inject(context: MutableMapping[str, Any], bindings: HostBindings) -> None:
    for key, value in bindings.as_context().items():
        if isinstance(context, ContextStore):
            context.put(key, value, origin=HOST_ORIGIN)
        else:
            context[key] = value


def _anchor_package(job: Any) -> str | None:
    """Package that resources of ``job`` are resolved against."""
    module_name = type(job).__module__
    module = sys.modules.get(module_name)
    if module is not None and hasattr(module, "__path__"):
        return module_name
    package = getattr(module, "__package__", None)
    return package or module_name.rpartition(".")[0] or None
