"""Registry of job implementations addressable by logical name."""

from __future__ import annotations

from collections.abc import Callable
from importlib.metadata import entry_points
from typing import Any, TypeVar

from jobinvoker.logger import get_logger

__all__ = [
    "ENTRY_POINT_GROUP",
    "JobFactory",
    "JobRegistry",
    "default_registry",
    "register_job",
]

ENTRY_POINT_GROUP = "jobinvoker.jobs"

JobFactory = Callable[[], Any]
F = TypeVar("F", bound=JobFactory)

logger = get_logger(__name__)


class JobRegistry:
    """Mapping from logical job name to a zero-argument factory.

    Jobs register themselves at process start, either with ``register_job`` at
    import time or through the ``jobinvoker.jobs`` entry point group of an
    installed distribution. Nothing is discovered lazily at invocation time.
    """

    def __init__(self) -> None:
        self._factories: dict[str, JobFactory] = {}

    def register(self, name: str, factory: JobFactory) -> None:
        """Register ``factory`` under ``name``, replacing any previous entry."""
        if not name:
            raise ValueError("Job name must be a non-empty string")
        if not callable(factory):
            raise TypeError(f"Factory for job '{name}' is not callable")
        if name in self._factories and self._factories[name] is not factory:
            logger.warning("Replacing registered job", job=name)
        self._factories[name] = factory

    def lookup(self, name: str) -> JobFactory | None:
        """Return the factory registered under ``name``, or None."""
        return self._factories.get(name)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register every job advertised under the entry point ``group``.

        Returns:
            Number of jobs registered
        """
        count = 0
        for entry_point in entry_points(group=group):
            try:
                self.register(entry_point.name, entry_point.load())
            except Exception as e:
                # One broken plugin must not hide the others; the job stays
                # unregistered and resolving it reports a ResolutionError.
                logger.warning(
                    "Could not load job entry point",
                    job=entry_point.name,
                    error=str(e),
                    exc_info=True,
                )
                continue
            count += 1
        logger.debug("Loaded job entry points", group=group, count=count)
        return count


default_registry = JobRegistry()


def register_job(name: str, registry: JobRegistry | None = None) -> Callable[[F], F]:
    """Class decorator registering a job factory under ``name``.

    Example:
        @register_job("nightly_export")
        class NightlyExportJob(Job): ...
    """

    def decorator(factory: F) -> F:
        target = default_registry if registry is None else registry
        target.register(name, factory)
        return factory

    return decorator
