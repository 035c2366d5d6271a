"""
Cross-backend properties of code generation: determinism, fresh-name
uniqueness, helper deduplication and loud failure on unknown constructs.
"""

import re
from types import SimpleNamespace

import pytest

from adl.core import ir
from adl.core.errors import UnsupportedConstructError
from adl.core.parser_impl import parse_adl
from adl.stacks import generate, get_backend
from adl.stacks.base.generator import BaseGenerator, GenerationContext

BACKENDS = ["script", "graph"]

PROGRAM = """@model = "gpt-4o-mini"

def classify(text: string): string {
  label: "spam" = `Classify ${text}`
  return label
}

public node main(message) {
  history = thread {
    verdict = classify(message)
  }
  elapsed = printTime {
    sleep(1)
  }
  match (verdict) {
    "spam" => goto reject(message)
    _ => print(verdict)
  }
}

private node reject(message) {
  return false
}

x = fetchJSON("https://example.com/a")
y = fetchJson("https://example.com/b")
"""


class TestDeterminism:
    """Identical input gives byte-identical output."""

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_repeated_generation(self, backend: str) -> None:
        """Two runs over one AST produce identical text."""
        program = parse_adl(PROGRAM)
        assert generate(program, backend) == generate(program, backend)

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_generator_instance_is_reusable(self, backend: str) -> None:
        """One generator instance starts each run from fresh state."""
        generator = get_backend(backend)
        program = parse_adl(PROGRAM)
        assert generator.generate(program) == generator.generate(program)

    def test_generation_does_not_mutate_ast(self) -> None:
        """Generating leaves the AST exactly as parsed."""
        program = parse_adl(PROGRAM)
        before = program.model_dump()
        generate(program, "graph")
        assert program.model_dump() == before


class TestUniqueness:
    """Sibling constructs that need temporaries get distinct names."""

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_prompt_functions(self, backend: str) -> None:
        """Three prompts get three distinct prompt functions."""
        output = generate(parse_adl("a = `one`\nb = `two`\nc = `three`"), backend)
        names = re.findall(r"def (_prompt_\d+)\(", output)
        assert len(names) == 3
        assert len(set(names)) == 3

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_two_time_blocks(self, backend: str) -> None:
        """Two time blocks in one body get separate start and end names."""
        source = "def f() {\n  time {\n    sleep(1)\n  }\n  time {\n    sleep(2)\n  }\n}"
        output = generate(parse_adl(source), backend)
        starts = set(re.findall(r"(_time_start_\d+) = time\.perf_counter\(\)", output))
        ends = set(re.findall(r"(_time_end_\d+) = time\.perf_counter\(\)", output))
        assert len(starts) == 2
        assert len(ends) == 2

    def test_nested_threads(self) -> None:
        """A nested thread saves and restores its own variable."""
        output = generate(parse_adl("thread {\n  subthread {\n  }\n}"), "script")
        assert "_saved_messages_1 = _ctx.messages" in output
        assert "_saved_messages_2 = _ctx.messages" in output
        assert "_ctx.messages = _saved_messages_2.subthread()" in output

    def test_context_fresh_names(self) -> None:
        """All prefixes share one counter."""
        ctx = GenerationContext()
        assert [ctx.fresh_name("x"), ctx.fresh_name("y"), ctx.fresh_name("x")] == [
            "_x_1",
            "_y_2",
            "_x_3",
        ]

    def test_context_scopes_restore(self) -> None:
        """Leaving a scope restores the enclosing one."""
        ctx = GenerationContext()
        with ctx.enter("function", ir.PrimitiveType(value="number")):
            with ctx.enter("node"):
                assert ctx.scope == "node"
            assert ctx.scope == "function"
        assert ctx.scope == "module"
        assert ctx.return_types == []


class TestHelperDeduplication:
    """Builtins used more than once produce one helper."""

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_repeated_builtin(self, backend: str) -> None:
        """A builtin used three times gets one helper."""
        output = generate(parse_adl('a = read("x")\nb = read("y")\nc = read("z")'), backend)
        assert output.count("def _builtin_read(path):") == 1

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_aliases(self, backend: str) -> None:
        """Two spellings of one builtin share a helper."""
        output = generate(parse_adl(PROGRAM), backend)
        assert output.count("def _builtin_fetch_json(url):") == 1

    def test_helpers_follow_prelude(self) -> None:
        """Helpers sit between the prelude and the program body."""
        output = generate(parse_adl('x = input("name? ")'), "script")
        assert output.index("def _get_client_with_config") < output.index("def _builtin_input")
        assert output.index("def _builtin_input") < output.index('x = _builtin_input("name? ")')


class TestScenarios:
    """Small end-to-end programs through both backends."""

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_full_program(self, backend: str) -> None:
        """A program using most constructs compiles in both backends."""
        output = generate(parse_adl(PROGRAM), backend)
        assert output.count('_ctx.client = _get_client_with_config(model="gpt-4o-mini")') == 1
        assert "response_schema={'type': 'string', 'enum': ['spam']}," in output
        assert 'label: Literal["spam"] = _prompt_' in output
        assert "history = _ctx.messages.new_messages()" in output
        assert "Time taken" in output

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_special_var_is_single_statement(self, backend: str) -> None:
        """@model becomes exactly one client rebuild."""
        output = generate(parse_adl('@model = "gpt-5-nano"'), backend)
        assert output.count("_get_client_with_config(model=") == 1
        assert '_ctx.client = _get_client_with_config(model="gpt-5-nano")' in output

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_print_hi(self, backend: str) -> None:
        """print("hi") compiles to itself."""
        assert 'print("hi")' in generate(parse_adl('print("hi")'), backend)


class TestUnsupportedConstructs:
    """A node outside the closed set of tags fails loudly."""

    @pytest.mark.parametrize("backend", BACKENDS)
    def test_unknown_tag(self, backend: str) -> None:
        """A node with an unknown tag raises instead of being skipped."""
        program = ir.AdlProgram.model_construct(nodes=[SimpleNamespace(type="bogus")])
        with pytest.raises(UnsupportedConstructError) as exc_info:
            generate(program, backend)
        assert exc_info.value.tag == "bogus"
        assert f"Unsupported construct 'bogus' in {backend} backend" in str(exc_info.value)

    def test_every_tag_has_a_visitor(self) -> None:
        """Every tag in the dispatch table names a real method."""
        for tag, method in BaseGenerator.DISPATCH.items():
            assert callable(getattr(BaseGenerator, method, None)), tag

    def test_statement_used_as_value(self) -> None:
        """A statement in value position raises."""
        nested = ir.Assignment(
            variable_name="x",
            value=ir.WhileLoop(condition=ir.BooleanLiteral(value=True)),
        )
        with pytest.raises(UnsupportedConstructError, match="whileLoop used as a value"):
            generate(ir.AdlProgram(nodes=[nested]), "script")
