"""Best-effort descriptions of the import environment for post-mortem logs.

Nothing here may fail an invocation: every error degrades to a placeholder.
"""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from jobinvoker.logger import get_logger

__all__ = ["PLACEHOLDER", "DiagnosticsReporter", "Scope", "ScopeChain"]

PLACEHOLDER = "[]"

logger = get_logger(__name__)


@dataclass(frozen=True)
class Scope:
    """One link of a scope chain: a module or package and where it loads from."""

    name: str
    locations: tuple[str, ...]


class ScopeChain:
    """Walks from a module up through its enclosing packages.

    Each iteration starts over from the module, so the chain can be rendered
    more than once.
    """

    def __init__(self, module_name: str) -> None:
        self.module_name = module_name

    def __iter__(self) -> Iterator[Scope]:
        name = self.module_name
        while name:
            yield Scope(name=name, locations=_locations(name))
            name = name.rpartition(".")[0]


def _locations(name: str) -> tuple[str, ...]:
    module = sys.modules.get(name)
    spec = getattr(module, "__spec__", None) if module is not None else importlib.util.find_spec(name)
    if spec is None:
        return ()
    if spec.submodule_search_locations:
        return tuple(spec.submodule_search_locations)
    if spec.origin:
        return (spec.origin,)
    return ()


def _bracket(items: Iterable[str]) -> str:
    return "[" + ",".join(str(item) for item in items) + "]"


class DiagnosticsReporter:
    """Builds diagnostic strings about where code is imported from."""

    def __init__(self, anchor_module: str = "jobinvoker") -> None:
        self.anchor_module = anchor_module

    def describe_environment(self) -> str:
        """Render the interpreter's module search path."""
        try:
            return f"sys.path = {_bracket(sys.path)}"
        except Exception as e:
            logger.debug("Could not describe environment", error=str(e))
            return PLACEHOLDER

    def describe_loader_chain(self) -> str:
        """Render the locations of the anchor module and each enclosing package."""
        try:
            return _bracket(_bracket(scope.locations) for scope in ScopeChain(self.anchor_module))
        except Exception as e:
            logger.debug("Could not describe loader chain", module=self.anchor_module, error=str(e))
            return PLACEHOLDER
