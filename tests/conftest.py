"""Shared pytest fixtures for ADL tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from adl.core.parser_impl import parse_adl
from adl.stacks.graph.generator import GraphGenerator
from adl.stacks.script.generator import ScriptGenerator


@pytest.fixture
def write_adl(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes ADL source into the temp directory."""

    def write(text: str, name: str = "agent.adl") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def compile_script() -> Callable[[str], str]:
    """Parse ADL source and generate it with the script backend."""
    return lambda text: ScriptGenerator().generate(parse_adl(text))


@pytest.fixture
def compile_graph() -> Callable[[str], str]:
    """Parse ADL source and generate it with the graph backend."""
    return lambda text: GraphGenerator().generate(parse_adl(text))
