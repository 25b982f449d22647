"""Built-in jobs for smoke testing the invoker end to end."""

from __future__ import annotations

import json
import shutil
from typing import Any, ClassVar

from jobinvoker.jobs.base import Job
from jobinvoker.jobs.registry import register_job
from jobinvoker.logger import get_logger

logger = get_logger(__name__)


@register_job("echo")
class EchoJob(Job):
    """Copy the input stream to the output stream after a greeting line.

    Context parameters:
        greeting: Text written before the echoed payload
        recipient: Name appended to the greeting
    """

    name: ClassVar[str] = "echo"
    DEFAULT_CONTEXT: ClassVar[dict[str, Any]] = {
        "greeting": "Hello",
        "recipient": "world",
    }

    def run_job(self) -> None:
        output = self.output_stream
        if output is None:
            raise RuntimeError("echo job requires an output stream")

        line = f"{self.context_map['greeting']}, {self.context_map['recipient']}\n"
        output.write(line.encode("utf-8"))
        if self.input_stream is not None:
            shutil.copyfileobj(self.input_stream, output)
        logger.info("Echo complete", recipient=self.context_map["recipient"])


@register_job("context_dump")
class ContextDumpJob(Job):
    """Write every string-valued context entry as a JSON line."""

    name: ClassVar[str] = "context_dump"

    def run_job(self) -> None:
        output = self.output_stream
        if output is None:
            raise RuntimeError("context_dump job requires an output stream")

        for key, value in self.context_map.items():
            if isinstance(value, str):
                output.write((json.dumps({"key": key, "value": value}) + "\n").encode("utf-8"))


@register_job("dummy_fail")
class DummyFailJob(Job):
    """Always fails, to exercise the host's failure channel."""

    name: ClassVar[str] = "dummy_fail"
    DEFAULT_CONTEXT: ClassVar[dict[str, Any]] = {"failure_message": "Dummy job failed as requested"}

    def run_job(self) -> None:
        raise RuntimeError(self.context_map["failure_message"])
