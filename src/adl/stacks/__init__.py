"""
Backend registry for ADL code generation.

Backends turn a parsed AdlProgram into Python source. Two are built in:

- script: straight-line module, statements run in source order
- graph:  module built around an execution graph of nodes and steps
"""

import logging

from ..core import ir
from ..core.errors import InvalidConfigurationError
from ..core.manifest import CompilerConfig
from .base.generator import BaseGenerator
from .graph.generator import GraphGenerator
from .script.generator import ScriptGenerator

logger = logging.getLogger(__name__)


class BackendRegistry:
    """
    Registry of generator classes by backend name.

    Supports:
    - Manual registration via register()
    - Lookup by name
    """

    def __init__(self) -> None:
        self._backends: dict[str, type[BaseGenerator]] = {}

    def register(self, name: str, generator_class: type[BaseGenerator]) -> None:
        """
        Register a generator class.

        Args:
            name: Backend name (used in CLI: --backend <name>)
            generator_class: Generator class (must extend BaseGenerator)

        Raises:
            InvalidConfigurationError: If name already registered or class invalid
        """
        if name in self._backends:
            raise InvalidConfigurationError(
                f"Backend '{name}' is already registered. "
                f"Cannot register {generator_class.__name__}."
            )

        if not issubclass(generator_class, BaseGenerator):
            raise InvalidConfigurationError(
                f"Backend class {generator_class.__name__} must extend BaseGenerator"
            )

        self._backends[name] = generator_class

    def get(self, name: str, config: CompilerConfig | None = None) -> BaseGenerator:
        """
        Get a generator instance by backend name.

        Raises:
            InvalidConfigurationError: If backend not found
        """
        if name not in self._backends:
            available = self.list_backends()
            raise InvalidConfigurationError(
                f"Backend '{name}' not found. Available backends: {available}"
            )
        return self._backends[name](config)

    def list_backends(self) -> list[str]:
        """List all registered backend names."""
        return sorted(self._backends)

    def describe(self, name: str) -> str:
        doc = (self._backends[name].__doc__ or "").strip()
        return doc.split("\n")[0]


registry = BackendRegistry()
registry.register("script", ScriptGenerator)
registry.register("graph", GraphGenerator)


def get_backend(name: str, config: CompilerConfig | None = None) -> BaseGenerator:
    return registry.get(name, config)


def list_backends() -> list[str]:
    return registry.list_backends()


def generate(
    program: ir.AdlProgram,
    backend: str | None = None,
    config: CompilerConfig | None = None,
) -> str:
    """
    Generate Python source for a program.

    Args:
        program: Parsed program
        backend: Backend name; defaults to the configured backend
        config: Compiler configuration; defaults apply when None

    Returns:
        Python source text
    """
    config = config or CompilerConfig()
    name = backend or config.backend
    logger.debug("Generating with backend '%s'", name)
    return get_backend(name, config).generate(program)


__all__ = [
    "BackendRegistry",
    "BaseGenerator",
    "GraphGenerator",
    "ScriptGenerator",
    "generate",
    "get_backend",
    "list_backends",
    "registry",
]
