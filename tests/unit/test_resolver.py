"""Tests for JobResolver."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from jobinvoker.errors import CapabilityError, ConfigurationError, ConstructionError, ResolutionError
from jobinvoker.jobs import JobRegistry
from jobinvoker.resolver import HAS_CONTEXT_MAP, RUNNABLE, JobResolver

from ..conftest import PlainJob, SampleJob


class NoContextJob:
    def run_job(self) -> None:
        pass


class NoEntryPointJob:
    def __init__(self) -> None:
        self.context_map: dict[str, Any] = {}


class NotAMappingJob:
    def __init__(self) -> None:
        self.context_map = ["not", "a", "mapping"]
        self.run_job = "not callable"


class BrokenPropertyJob:
    @property
    def context_map(self) -> dict[str, Any]:
        raise RuntimeError("context unavailable")

    def run_job(self) -> None:
        pass


def _failing_factory() -> Any:
    raise OSError("cannot allocate job")


class TestResolveName:
    """Name validation and registry lookup."""

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name_fails_before_lookup(self, name: str | None) -> None:
        registry = MagicMock(spec=JobRegistry)

        with pytest.raises(ConfigurationError, match="missing or empty"):
            JobResolver(registry).resolve(name)

        registry.lookup.assert_not_called()

    def test_unknown_name_raises_resolution_error(self, registry: JobRegistry) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            JobResolver(registry).resolve("NoSuchJob")

        message = str(exc_info.value)
        assert "NoSuchJob" in message
        assert "SampleJob" in message

    def test_unknown_name_constructs_nothing(self, registry: JobRegistry) -> None:
        with pytest.raises(ResolutionError):
            JobResolver(registry).resolve("NoSuchJob")

        assert SampleJob.instances == []

    def test_resolves_registered_job(self, registry: JobRegistry) -> None:
        job = JobResolver(registry).resolve("SampleJob")

        assert isinstance(job, SampleJob)
        assert job.context_map["owned"] == "default"

    def test_each_resolve_constructs_new_instance(self, registry: JobRegistry) -> None:
        resolver = JobResolver(registry)

        first = resolver.resolve("SampleJob")
        second = resolver.resolve("SampleJob")

        assert first is not second
        assert first.context_map is not second.context_map

    def test_duck_typed_job_accepted(self, registry: JobRegistry) -> None:
        job = JobResolver(registry).resolve("PlainJob")

        assert isinstance(job, PlainJob)

    def test_defaults_to_process_registry(self) -> None:
        job = JobResolver().resolve("echo")

        assert job.context_map["greeting"] == "Hello"


class TestConstruction:
    """Failures while constructing the job."""

    def test_factory_failure_is_wrapped(self) -> None:
        registry = JobRegistry()
        registry.register("Fragile", _failing_factory)

        with pytest.raises(ConstructionError) as exc_info:
            JobResolver(registry).resolve("Fragile")

        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.cause is exc_info.value.__cause__
        assert "Fragile" in str(exc_info.value)


class TestCapabilities:
    """Capability checks on the constructed instance."""

    @pytest.mark.parametrize(
        ("factory", "missing"),
        [
            (NoContextJob, [HAS_CONTEXT_MAP]),
            (NoEntryPointJob, [RUNNABLE]),
            (NotAMappingJob, [HAS_CONTEXT_MAP, RUNNABLE]),
            (object, [HAS_CONTEXT_MAP, RUNNABLE]),
        ],
    )
    def test_missing_capabilities_reported(self, factory: Any, missing: list[str]) -> None:
        registry = JobRegistry()
        registry.register("Incomplete", factory)

        with pytest.raises(CapabilityError) as exc_info:
            JobResolver(registry).resolve("Incomplete")

        assert exc_info.value.missing == missing
        for capability in missing:
            assert capability in str(exc_info.value)

    def test_context_map_access_failure(self) -> None:
        registry = JobRegistry()
        registry.register("Broken", BrokenPropertyJob)

        with pytest.raises(CapabilityError) as exc_info:
            JobResolver(registry).resolve("Broken")

        assert exc_info.value.missing == [HAS_CONTEXT_MAP]
        assert isinstance(exc_info.value.__cause__, RuntimeError)
