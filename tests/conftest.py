"""Shared test fixtures for job-invoker tests."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, ClassVar

import pytest

from jobinvoker.invoker import Invoker
from jobinvoker.jobs import Job, JobRegistry
from jobinvoker.models import HostBindings
from jobinvoker.resolver import JobResolver


@pytest.fixture(scope="session", autouse=True)
def configure_test_logging() -> None:
    """Keep library loggers quiet while leaving jobinvoker logs visible."""
    logging.getLogger().setLevel(logging.WARNING)
    logging.getLogger("jobinvoker").setLevel(logging.DEBUG)


class SampleJob(Job):
    """Records every constructed instance and a snapshot of its context at run time."""

    name: ClassVar[str] = "SampleJob"
    DEFAULT_CONTEXT: ClassVar[dict[str, Any]] = {"x": "0", "owned": "default"}
    instances: ClassVar[list[SampleJob]] = []

    def __init__(self) -> None:
        super().__init__()
        self.seen: dict[str, Any] | None = None
        SampleJob.instances.append(self)

    def run_job(self) -> None:
        self.seen = dict(self.context_map)


class ExplodingJob(Job):
    """Entry point always raises."""

    name: ClassVar[str] = "ExplodingJob"

    def run_job(self) -> None:
        raise ValueError("boom")


class PlainJob:
    """Satisfies the job contract without inheriting from Job."""

    def __init__(self) -> None:
        self.context_map: dict[str, Any] = {"plain": "yes"}
        self.ran = False

    def run_job(self) -> None:
        self.ran = True


@pytest.fixture(autouse=True)
def reset_sample_instances() -> None:
    SampleJob.instances.clear()


@pytest.fixture
def registry() -> JobRegistry:
    """Registry holding the test jobs."""
    registry = JobRegistry()
    registry.register("SampleJob", SampleJob)
    registry.register("ExplodingJob", ExplodingJob)
    registry.register("PlainJob", PlainJob)
    return registry


@pytest.fixture
def invoker(registry: JobRegistry) -> Invoker:
    return Invoker(resolver=JobResolver(registry))


@pytest.fixture
def bindings() -> HostBindings:
    return HostBindings(
        input_stream=io.BytesIO(b"payload"),
        output_stream=io.BytesIO(),
        invocation_metadata={"request_id": "req-1"},
    )


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], str]:
    """Write a context source under tmp_path and return its path as a string."""

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="iso-8859-1")
        return str(path)

    return _write
