"""Startup settings for job-invoker.

Settings are read from the environment once, when the process starts, and are
read-only afterwards. The invocation engine never reads the environment itself.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from jobinvoker.errors import ConfigurationError
from jobinvoker.models import ConfigError
from jobinvoker.overlay import resolve_source

__all__ = [
    "DEBUG_VALUES",
    "ENV_CONTEXT_FILES",
    "ENV_DEBUG",
    "ENV_JOB_NAME",
    "ENV_LOGGING_CONFIG",
    "ENV_LOG_LEVEL",
    "HOST_LABEL_VARS",
    "HandlerSettings",
    "load_logging_config",
    "split_sources",
]

ENV_JOB_NAME = "JOBINVOKER_JOB_NAME"
ENV_CONTEXT_FILES = "JOBINVOKER_CONTEXT_FILES"
ENV_DEBUG = "JOBINVOKER_DEBUG"
ENV_LOGGING_CONFIG = "JOBINVOKER_LOGGING_CONFIG"
ENV_LOG_LEVEL = "JOBINVOKER_LOG_LEVEL"

DEBUG_VALUES = frozenset({"on", "ON", "true", "TRUE", "1"})

# Environment variable -> log field bound for every invocation
HOST_LABEL_VARS = {
    "AWS_REGION": "region",
    "AWS_LAMBDA_FUNCTION_NAME": "function_name",
    "AWS_LAMBDA_FUNCTION_VERSION": "function_version",
}

_SOURCE_SEPARATORS = re.compile(r"[:;]")


@dataclass(frozen=True)
class HandlerSettings:
    """Process configuration resolved at startup."""

    job_name: str | None = None
    context_sources: tuple[str, ...] = ()
    debug: bool = False
    logging_config: str | None = None
    log_level: int = logging.INFO
    host_labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HandlerSettings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        env = os.environ if environ is None else environ

        return cls(
            job_name=env.get(ENV_JOB_NAME) or None,
            context_sources=split_sources(env.get(ENV_CONTEXT_FILES)),
            debug=env.get(ENV_DEBUG) in DEBUG_VALUES,
            logging_config=env.get(ENV_LOGGING_CONFIG) or None,
            log_level=_parse_log_level(env.get(ENV_LOG_LEVEL, "INFO")),
            host_labels={label: env.get(var) or "null" for var, label in HOST_LABEL_VARS.items()},
        )

    @property
    def effective_log_level(self) -> int:
        return logging.DEBUG if self.debug else self.log_level


def split_sources(value: str | None) -> tuple[str, ...]:
    """Split a ``:`` or ``;`` separated list of source identifiers.

    Blank entries are dropped; order is preserved.
    """
    if value is None:
        return ()
    return tuple(part.strip() for part in _SOURCE_SEPARATORS.split(value) if part.strip())


def load_logging_config(
    locator: str,
    anchor: str | None = "jobinvoker",
    trace: Callable[[str], None] | None = None,
) -> dict[str, Any] | None:
    """Load and validate a YAML ``logging.config.dictConfig`` document.

    The locator is resolved like a context source: package resource relative
    to ``anchor`` first, file path second.

    Args:
        locator: Resource name or file path
        anchor: Package for resource lookups
        trace: Callback for startup tracing, used before logging is configured

    Returns:
        The parsed document, or None if the locator resolves to nothing

    Raises:
        ConfigurationError: If the document cannot be read or fails validation
    """
    trace = trace or (lambda message: None)

    source = resolve_source(locator, anchor)
    if source is None:
        trace(f"Could not resolve logging configuration '{locator}'")
        return None
    trace(f"Resolved logging configuration '{locator}' to '{source}'")

    try:
        with source.open("rb") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            "Could not read logging configuration",
            errors=[ConfigError(path=locator, message=str(e))],
            cause=e,
        ) from e

    validator = jsonschema.Draft7Validator(_load_schema())
    errors = [
        ConfigError(
            path=".".join(str(p) for p in error.absolute_path) or "(root)",
            message=error.message,
        )
        for error in validator.iter_errors(data)
    ]
    if errors:
        raise ConfigurationError(f"Invalid logging configuration '{locator}'", errors=errors)

    return data


def _load_schema() -> dict[str, Any]:
    """Load the logging config schema from package resources."""
    schema_path = Path(__file__).parent / "schemas" / "logging-config-schema.yaml"
    with schema_path.open() as f:
        return yaml.safe_load(f)


def _parse_log_level(value: str) -> int:
    """Parse a log level name such as ``debug`` or ``WARNING``."""
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        valid_levels = ", ".join(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
        raise ConfigurationError(
            "Invalid startup configuration",
            errors=[ConfigError(path=ENV_LOG_LEVEL, message=f"Invalid log level: {value}. Valid levels: {valid_levels}")],
        )
    return level
