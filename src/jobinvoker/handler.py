"""Host-facing entry point.

A hosting runtime calls :func:`handle` with the request's input stream, output
stream and invocation metadata. The job to run and its configuration sources
come from startup settings (see :mod:`jobinvoker.config`).
"""

from __future__ import annotations

import functools
from typing import Any, BinaryIO

import structlog
from rich.console import Console

from jobinvoker.config import HandlerSettings, load_logging_config
from jobinvoker.diagnostics import DiagnosticsReporter
from jobinvoker.errors import ConfigurationError, InvocationError
from jobinvoker.invoker import Invoker
from jobinvoker.jobs import default_registry
from jobinvoker.logger import configure_logging, get_logger
from jobinvoker.models import HostBindings, JobDescriptor

__all__ = ["JobHandler", "handle", "initialize", "startup"]

_stderr = Console(stderr=True, highlight=False)

logger = get_logger(__name__)


def initialize(settings: HandlerSettings) -> None:
    """Configure logging from startup settings.

    Tracing before logging exists goes to stderr and only when debugging is on.
    """

    def trace(message: str) -> None:
        if settings.debug:
            _stderr.print(f"initLog: {message}")

    trace(f"job={settings.job_name} sources={list(settings.context_sources)}")

    dict_config = None
    if settings.logging_config is not None:
        trace(f"logging configuration locator={settings.logging_config}")
        dict_config = load_logging_config(settings.logging_config, trace=trace)

    configure_logging(settings.effective_log_level, dict_config=dict_config)


@functools.cache
def startup() -> HandlerSettings:
    """Read settings, configure logging and load job plugins, once per process."""
    settings = HandlerSettings.from_env()
    initialize(settings)
    default_registry.load_entry_points()
    return settings


class JobHandler:
    """Adapts one host request to one job invocation.

    Holds only read-only startup state, so one handler can serve concurrent
    requests; every request gets its own job instance and context.
    """

    def __init__(
        self,
        settings: HandlerSettings,
        invoker: Invoker | None = None,
        diagnostics: DiagnosticsReporter | None = None,
    ) -> None:
        self.settings = settings
        self._invoker = invoker or Invoker()
        self._diagnostics = diagnostics or DiagnosticsReporter(__name__)

    def handle_request(
        self,
        input_stream: BinaryIO | None,
        output_stream: BinaryIO | None,
        invocation_metadata: Any = None,
    ) -> None:
        """Run the configured job for one request.

        Raises:
            InvocationError: Logged once here, then propagated to the host
        """
        log = logger.bind(job=self.settings.job_name)

        with structlog.contextvars.bound_contextvars(**self.settings.host_labels):
            log.debug("Environment", detail=self._diagnostics.describe_environment())
            log.debug("Loader chain", detail=self._diagnostics.describe_loader_chain())
            log.debug("Logging configuration", locator=self.settings.logging_config)
            try:
                if not self.settings.job_name:
                    raise ConfigurationError("Job name is missing or empty; set JOBINVOKER_JOB_NAME")
                self._invoker.run(
                    JobDescriptor(self.settings.job_name),
                    self.settings.context_sources,
                    HostBindings(input_stream, output_stream, invocation_metadata),
                )
            except InvocationError as e:
                log.error("Invocation failed", kind=e.kind.value, error=e.message, exc_info=True)
                raise


@functools.cache
def _default_handler() -> JobHandler:
    return JobHandler(startup())


def handle(input_stream: BinaryIO | None, output_stream: BinaryIO | None, invocation_metadata: Any = None) -> None:
    """Entry point for hosting runtimes."""
    _default_handler().handle_request(input_stream, output_stream, invocation_metadata)
