"""
ADL - a small DSL for agent and LLM orchestration workflows.

Compiles ADL source (prompts, tools, message threads, graph nodes) into
executable Python, either as a linear script or as an execution graph.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import (
    AdlError,
    BackendError,
    ConfigError,
    InvalidConfigurationError,
    MalformedTemplateError,
    ParseError,
    UnsupportedConstructError,
)
from .core.parser import parse_adl, parse_file
from .stacks import generate

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "parse_adl",
    "parse_file",
    "generate",
    "AdlError",
    "ParseError",
    "BackendError",
    "ConfigError",
    "UnsupportedConstructError",
    "InvalidConfigurationError",
    "MalformedTemplateError",
]
