"""Tests for evaluation harness generation."""

import pytest

from adl.core.errors import InvalidConfigurationError
from adl.core.parser_impl import parse_adl
from adl.stacks.harness import RESULT_FILE, generate_evaluation_harness

SOURCE = """private node prepare(x) {
  return x
}

public node main(question) {
  goto prepare(question)
}

node other() {
}
"""


@pytest.fixture
def program():
    return parse_adl(SOURCE)


class TestEvaluationHarness:
    """Tests for node selection and the rendered script."""

    def test_defaults_to_first_entry_node(self, program) -> None:
        """Without --node the first public node is evaluated."""
        output = generate_evaluation_harness(program, "agent")
        assert "from agent import run_main\n" in output
        assert "result = run_main(*args)" in output

    def test_explicit_node(self, program) -> None:
        """A named node is imported from the given module."""
        output = generate_evaluation_harness(program, "pkg.agent", node_name="other")
        assert "from pkg.agent import run_other" in output
        assert '"node": "other"' in output

    def test_writes_result_file(self, program) -> None:
        """The harness dumps its result to __evaluate.json."""
        output = generate_evaluation_harness(program, "agent")
        assert RESULT_FILE == "__evaluate.json"
        assert 'RESULT_FILE = "__evaluate.json"' in output
        assert "json.dump(" in output

    def test_default_args(self, program) -> None:
        """Default arguments are embedded as a Python list."""
        output = generate_evaluation_harness(program, "agent", args=["What is ADL?", 3])
        assert "else ['What is ADL?', 3])" in output

    def test_no_default_args(self, program) -> None:
        """No default arguments means an empty list."""
        output = generate_evaluation_harness(program, "agent")
        assert "else [])" in output

    def test_private_node(self, program) -> None:
        """A private node cannot be evaluated."""
        with pytest.raises(InvalidConfigurationError, match="private"):
            generate_evaluation_harness(program, "agent", node_name="prepare")

    def test_missing_node(self, program) -> None:
        """An unknown node name is rejected."""
        with pytest.raises(InvalidConfigurationError, match="Node 'nope' not found"):
            generate_evaluation_harness(program, "agent", node_name="nope")

    def test_program_without_entry_nodes(self) -> None:
        """A program with no nodes has nothing to evaluate."""
        with pytest.raises(InvalidConfigurationError, match="No graph nodes"):
            generate_evaluation_harness(parse_adl("x = 1"), "agent")

    def test_all_nodes_private(self) -> None:
        """With only private nodes the error says so instead of claiming there are none."""
        program = parse_adl("private node hidden() {\n}")
        with pytest.raises(InvalidConfigurationError, match="All graph nodes are private"):
            generate_evaluation_harness(program, "agent")

    @pytest.mark.parametrize("module_name", ["my-agent", "class", "pkg..agent", "1agent"])
    def test_invalid_module_name(self, program, module_name: str) -> None:
        """Module names Python could not import are rejected up front."""
        with pytest.raises(InvalidConfigurationError, match="not a valid Python module name"):
            generate_evaluation_harness(program, module_name)
