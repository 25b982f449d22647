"""Job contract, registry and built-in jobs."""

from __future__ import annotations

from .base import HasContextMap, Job, Runnable
from .dummy import ContextDumpJob, DummyFailJob, EchoJob
from .registry import ENTRY_POINT_GROUP, JobRegistry, default_registry, register_job

__all__ = [
    "ENTRY_POINT_GROUP",
    "ContextDumpJob",
    "DummyFailJob",
    "EchoJob",
    "HasContextMap",
    "Job",
    "JobRegistry",
    "Runnable",
    "default_registry",
    "register_job",
]
