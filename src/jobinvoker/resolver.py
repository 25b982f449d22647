"""Locate, construct and vet a job implementation by logical name."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from jobinvoker.errors import CapabilityError, ConfigurationError, ConstructionError, ResolutionError
from jobinvoker.jobs.registry import JobRegistry, default_registry
from jobinvoker.logger import get_logger

__all__ = ["HAS_CONTEXT_MAP", "RUNNABLE", "JobResolver"]

HAS_CONTEXT_MAP = "HasContextMap"
RUNNABLE = "Runnable"

logger = get_logger(__name__)


class JobResolver:
    """Turns a job name into a ready-to-run job instance.

    Resolution reads no configuration; the only side effect is constructing
    the instance.
    """

    def __init__(self, registry: JobRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    def resolve(self, logical_name: str | None) -> Any:
        """Construct the job registered under ``logical_name``.

        Raises:
            ConfigurationError: If the name is missing or blank
            ResolutionError: If no job is registered under the name
            ConstructionError: If the job factory raised
            CapabilityError: If the instance has no context map or entry point
        """
        if logical_name is None or not logical_name.strip():
            raise ConfigurationError("Job name is missing or empty")

        factory = self._registry.lookup(logical_name)
        if factory is None:
            available = ", ".join(self._registry.names()) or "(none)"
            raise ResolutionError(f"Job '{logical_name}' not found. Registered jobs: {available}")

        try:
            job = factory()
        except Exception as e:
            raise ConstructionError(f"Error constructing job '{logical_name}': {e}", cause=e) from e

        self._check_capabilities(logical_name, job)
        logger.debug("Resolved job", job=logical_name, job_class=_qualified_name(job))
        return job

    def _check_capabilities(self, logical_name: str, job: Any) -> None:
        missing: list[str] = []

        try:
            context_map = job.context_map
        except AttributeError:
            context_map = None
        except Exception as e:
            raise CapabilityError(
                f"Could not read context_map of job '{logical_name}' ({_qualified_name(job)}): {e}",
                missing=[HAS_CONTEXT_MAP],
                cause=e,
            ) from e
        if not isinstance(context_map, MutableMapping):
            missing.append(HAS_CONTEXT_MAP)

        if not callable(getattr(job, "run_job", None)):
            missing.append(RUNNABLE)

        if missing:
            raise CapabilityError(
                f"Job '{logical_name}' ({_qualified_name(job)}) is missing required capabilities: "
                + ", ".join(missing),
                missing=missing,
            )


def _qualified_name(obj: Any) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"
