"""
Tests for the linear-script backend.

Most tests compile a short program and look for the exact lines the
construct should produce.
"""

import pytest

from adl.core import ir
from adl.core.errors import InvalidConfigurationError
from adl.core.manifest import CompilerConfig
from adl.core.parser_impl import parse_adl
from adl.stacks.script.generator import ScriptGenerator


class TestPrelude:
    """Tests for the module header."""

    def test_prelude_imports_runtime(self, compile_script) -> None:
        """Scripts import the runtime client but not the graph."""
        output = compile_script("x = 1")
        assert output.startswith("# Generated by adlc. Do not edit.\n")
        assert "from adl_runtime import MessageThread, StatelogClient, get_client" in output
        assert "from adl_runtime import Graph" not in output

    def test_prelude_uses_config(self) -> None:
        """Model and statelog host come from the config."""
        config = CompilerConfig(default_model="gpt-5-nano", statelog_host="http://log:9000")
        output = ScriptGenerator(config).generate(parse_adl("x = 1"))
        assert '_client_config = {"model": "gpt-5-nano"}' in output
        assert '_statelog = StatelogClient("http://log:9000")' in output

    def test_output_ends_with_newline(self, compile_script) -> None:
        """Output ends with exactly one newline."""
        assert compile_script("x = 1").endswith("\nx = 1\n")


class TestExpressions:
    """Tests for literals, calls and operators."""

    def test_print_hi(self, compile_script) -> None:
        """print needs no helper function."""
        output = compile_script('print("hi")')
        assert output.endswith('\nprint("hi")\n')
        assert "def _builtin_" not in output

    def test_literals(self, compile_script) -> None:
        """Literals become their Python spellings."""
        output = compile_script('a = 1.5\nb = true\nc = "say \\"hi\\""\nd = [1, "x"]')
        assert "a = 1.5" in output
        assert "b = True" in output
        assert 'c = "say \\"hi\\""' in output
        assert 'd = [1, "x"]' in output

    def test_interpolated_string_is_fstring(self, compile_script) -> None:
        """Interpolation becomes an f-string with other braces escaped."""
        output = compile_script('greeting = "hi ${name} {not a field}"')
        assert 'greeting = f"hi {name} {{not a field}}"' in output

    def test_multi_line_string(self, compile_script) -> None:
        """Triple-quoted strings stay triple-quoted."""
        output = compile_script('text = """one\ntwo"""')
        assert 'text = """one\ntwo"""' in output

    def test_object_literal(self, compile_script) -> None:
        """Object keys become quoted dict keys."""
        output = compile_script('config = {model: "gpt", temperature: 0.2}')
        assert 'config = {"model": "gpt", "temperature": 0.2}' in output

    def test_access_chain(self, compile_script) -> None:
        """Access chains are written out unchanged."""
        output = compile_script('name = response.data[0].get("name")')
        assert 'name = response.data[0].get("name")' in output

    def test_binary_operation(self, compile_script) -> None:
        """Operators are spaced on both sides."""
        assert "total = price * 2" in compile_script("total = price * 2")

    def test_compound_assignment(self, compile_script) -> None:
        """Compound assignment is a statement of its own."""
        assert "count += 1" in compile_script("count += 1")

    def test_builtin_with_helper(self, compile_script) -> None:
        """Builtins with a helper emit it and call it."""
        output = compile_script('page = fetch("https://example.com")')
        assert "def _builtin_fetch(url):" in output
        assert 'page = _builtin_fetch("https://example.com")' in output

    def test_sleep_maps_to_time(self, compile_script) -> None:
        """sleep maps straight to time.sleep."""
        assert "time.sleep(2)" in compile_script("sleep(2)")

    def test_user_function_shadows_builtin(self, compile_script) -> None:
        """A user function with a builtin's name wins."""
        output = compile_script('def read(path) {\n  return path\n}\nread("notes.txt")')
        assert "def _builtin_read" not in output
        assert 'read("notes.txt")' in output


class TestPrompts:
    """Tests for prompt hoisting and response schemas."""

    def test_prompt_is_hoisted(self, compile_script) -> None:
        """Prompts become functions defined before their use."""
        output = compile_script("summary = `Summarise ${text}`")
        assert "def _prompt_1(text):" in output
        assert '    prompt = f"Summarise {text}"' in output
        assert "response_schema={'type': 'string'}," in output
        assert output.index("def _prompt_1(text):") < output.index("summary = _prompt_1(text)")

    def test_schema_from_type_hint(self, compile_script) -> None:
        """A preceding type hint sets the response schema."""
        output = compile_script("count :: number\ncount = `How many?`")
        assert "count: float" in output
        assert "response_schema={'type': 'number'}," in output
        assert "count = _prompt_1()" in output

    def test_schema_from_annotated_assignment(self, compile_script) -> None:
        """An annotated assignment sets the response schema."""
        output = compile_script("tags: string[] = `List tags`")
        assert "response_schema={'type': 'array', 'items': {'type': 'string'}}," in output
        assert "tags: list[str] = _prompt_1()" in output

    def test_schema_from_return_type(self, compile_script) -> None:
        """A returned prompt uses the function's return type."""
        output = compile_script("def ok(): boolean {\n  return `Is it ok?`\n}")
        assert "response_schema={'type': 'boolean'}," in output
        assert "    return _prompt_1()" in output

    def test_prompt_config(self, compile_script) -> None:
        """The llm config object is passed through."""
        output = compile_script('answer = llm("Hi", {temperature: 0})')
        assert 'config={"temperature": 0},' in output

    def test_prompt_without_config_has_no_config_argument(self, compile_script) -> None:
        """Prompts without config omit the argument."""
        assert "config=" not in compile_script("answer = `Hi`")


class TestTools:
    """Tests for `uses` statements and the tools passed to prompts."""

    def test_uses_forwards_tools_to_next_prompt(self, compile_script) -> None:
        """The prompt after `uses` hands the named functions to the client."""
        source = (
            "def search(query: string): string {\n  return query\n}\n"
            "def answer(question) {\n  uses search\n  reply = `Answer ${question}`\n"
            "  return reply\n}"
        )
        output = compile_script(source)
        assert '        tools={"search": search},' in output
        prompt = output[output.index("def _prompt_1(question):") :]
        assert prompt.index("response_schema=") < prompt.index("tools=") < prompt.index("    )")

    def test_tools_apply_to_one_prompt(self, compile_script) -> None:
        """The selection is cleared once a prompt has taken it."""
        source = "def lookup(key) {\n  return key\n}\nuse lookup\na = `first`\nb = `second`"
        output = compile_script(source)
        assert output.count("tools=") == 1
        assert output.index("def _prompt_1") < output.index("tools=") < output.index("def _prompt_2")

    def test_imported_tools_and_plus_syntax(self, compile_script) -> None:
        """Tools from `import tools` and named imports can be combined."""
        source = (
            'import tools { lookup } from "./tools.adl"\n'
            'import { rank } from "./ranking.py"\n'
            "+lookup, rank\n"
            "found = `Find it`"
        )
        output = compile_script(source)
        assert "from tools import lookup" in output
        assert 'tools={"lookup": lookup, "rank": rank},' in output

    def test_repeated_tool_is_passed_once(self, compile_script) -> None:
        """Naming the same tool twice does not duplicate it."""
        output = compile_script("def f() {\n}\nuses f\nuses f\nx = `Hi`")
        assert 'tools={"f": f},' in output

    def test_uses_in_function_does_not_leak(self, compile_script) -> None:
        """A selection made inside a function is dropped at its end."""
        output = compile_script("def helper() {\n  uses helper\n}\nx = `Hi`")
        assert "def helper():\n    pass" in output
        assert "tools=" not in output

    def test_prompt_without_uses_has_no_tools(self, compile_script) -> None:
        """Prompts with no selection leave the tools argument out."""
        assert "tools=" not in compile_script("def f() {\n}\nx = `Hi`")

    def test_unknown_tool(self) -> None:
        """A tool name that is neither defined nor imported is rejected."""
        with pytest.raises(InvalidConfigurationError, match="Unknown tool 'missing'"):
            ScriptGenerator().generate(parse_adl("uses missing\nx = `Hi`"))


class TestDefinitions:
    """Tests for functions and graph nodes in a linear script."""

    def test_function_definition(self, compile_script) -> None:
        """Types, docstring and body carry over to the def."""
        source = 'def greet(name: string): string {\n  """Say hi."""\n  return "hi ${name}"\n}'
        output = compile_script(source)
        assert 'def greet(name: str) -> str:\n    """Say hi."""\n    return f"hi {name}"' in output

    def test_empty_function_gets_pass(self, compile_script) -> None:
        """Empty bodies become pass."""
        assert "def noop():\n    pass" in compile_script("def noop() {}")

    def test_graph_node_is_plain_function(self, compile_script) -> None:
        """Without a graph, nodes are functions and goto returns a call."""
        output = compile_script("node main(x) {\n  goto finish(x)\n}\nnode finish(y) {\n  print(y)\n}")
        assert "def main(x):\n    return finish(x)" in output
        assert "def finish(y):\n    print(y)" in output
        assert "@graph" not in output

    def test_module_level_node_call(self, compile_script) -> None:
        """goto at module level is a bare call."""
        output = compile_script("node main(x) {\n}\ngoto main(1)")
        assert output.endswith("\nmain(1)\n")

    def test_module_level_return_keeps_value(self, compile_script) -> None:
        """return at module level keeps only its value."""
        assert compile_script("return compute()").endswith("\ncompute()\n")


class TestControlFlow:
    """Tests for if, while, match, threads and time blocks."""

    def test_if_elif_else(self, compile_script) -> None:
        """else if becomes elif."""
        output = compile_script("if (a) {\n  x = 1\n} else if (b) {\n} else {\n  x = 3\n}")
        assert "if a:\n    x = 1\nelif b:\n    pass\nelse:\n    x = 3" in output

    def test_if_without_else(self, compile_script) -> None:
        """No else branch means no else clause."""
        output = compile_script('if (x > 1) {\n  print("big")\n}')
        assert 'if x > 1:\n    print("big")' in output
        assert "else:" not in output

    def test_while_loop(self, compile_script) -> None:
        """while keeps its condition and body."""
        output = compile_script("while (n < 3) {\n  n += 1\n}")
        assert "while n < 3:\n    n += 1" in output

    def test_match_lowering(self, compile_script) -> None:
        """match becomes an if chain over a saved subject."""
        source = 'match (status) {\n  "ok" => print("fine")\n  "bad" => print("no")\n  _ => print("?")\n}'
        output = compile_script(source)
        expected = (
            "_match_1 = status\n"
            'if _match_1 == "ok":\n'
            '    print("fine")\n'
            'elif _match_1 == "bad":\n'
            '    print("no")\n'
            "else:\n"
            '    print("?")'
        )
        assert expected in output

    def test_match_arms_after_default_are_dropped(self, compile_script) -> None:
        """Arms after the default can never run."""
        output = compile_script('match (x) {\n  _ => print("a")\n  1 => print("b")\n}')
        assert 'print("a")' in output
        assert 'print("b")' not in output

    def test_message_thread(self, compile_script) -> None:
        """A thread swaps in a fresh message list and restores it."""
        output = compile_script("history = thread {\n  x = 1\n}")
        expected = (
            "_saved_messages_1 = _ctx.messages\n"
            "_ctx.messages = MessageThread()\n"
            "try:\n"
            "    x = 1\n"
            "    history = _ctx.messages.new_messages()\n"
            "finally:\n"
            "    _ctx.messages = _saved_messages_1"
        )
        assert expected in output

    @pytest.mark.parametrize("kind", ["subthread", "parallel"])
    def test_nested_threads_derive_from_saved(self, compile_script, kind: str) -> None:
        """subthread and parallel start from the saved thread."""
        output = compile_script(f"{kind} {{\n}}")
        assert f"_ctx.messages = _saved_messages_1.{kind}()" in output
        assert "try:\n    pass\nfinally:" in output

    def test_print_time_block(self, compile_script) -> None:
        """printTime wraps the body in timers and prints the duration."""
        output = compile_script("printTime {\n  sleep(1)\n}")
        assert "_time_start_1 = time.perf_counter()\ntime.sleep(1)\n_time_end_1 = time.perf_counter()" in output
        assert 'print(f"Time taken: {_time_end_1 - _time_start_1:.3f}s")' in output

    def test_assigned_time_block(self, compile_script) -> None:
        """An assigned time block stores the duration silently."""
        output = compile_script("elapsed = time {\n}")
        assert "elapsed = _time_end_1 - _time_start_1" in output
        assert "Time taken" not in output


class TestSpecialVariables:
    """Tests for @model and @messages."""

    def test_model(self, compile_script) -> None:
        """@model rebuilds the client once."""
        output = compile_script('@model = "gpt-5-nano"')
        assert output.count('_ctx.client = _get_client_with_config(model="gpt-5-nano")') == 1

    def test_messages(self, compile_script) -> None:
        """@messages replaces the message thread."""
        assert "_ctx.messages = MessageThread(history)" in compile_script("@messages = history")

    def test_unknown_special_variable(self) -> None:
        """An AST with another special variable is rejected."""
        program = ir.AdlProgram(
            nodes=[ir.SpecialVar(name="temperature", value=ir.NumberLiteral(value="1"))]
        )
        with pytest.raises(InvalidConfigurationError, match="@temperature"):
            ScriptGenerator().generate(program)


class TestImportsAndTrivia:
    """Tests for imports, comments and blank lines."""

    def test_imports(self, compile_script) -> None:
        """Each import form maps to a Python import."""
        output = compile_script(
            'import { search, rank } from "./tools/web.py"\n'
            'import * as np from "numpy"\n'
            'import yaml from "yaml"\n'
            'import parser from "my/parser"\n'
        )
        assert "from tools.web import search, rank" in output
        assert "import numpy as np" in output
        assert "import yaml\n" in output
        assert "import my.parser as parser" in output

    def test_tool_import(self, compile_script) -> None:
        """Tool imports are plain Python imports of the compiled module."""
        output = compile_script('import tools { lookup } from "./tools.adl"')
        assert "from tools import lookup" in output
        assert "_ctx.tools" not in output

    def test_node_import(self, compile_script) -> None:
        """Node imports import the compiled module."""
        output = compile_script('import nodes { plan } from "agents/planner.adl"')
        assert "from agents.planner import plan" in output

    def test_comments(self, compile_script) -> None:
        """Both comment styles become # lines."""
        output = compile_script("// note\n/* first\n   second */\nx = 1")
        assert "# note\n# first\n# second\nx = 1" in output

    def test_blank_line_kept_only_after_newline(self, compile_script) -> None:
        """Blank lines survive only where the source had them."""
        output = compile_script("x = 1\ny = 2\n\nz = 3\n")
        assert output.endswith("x = 1\ny = 2\n\nz = 3\n")
