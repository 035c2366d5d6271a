"""Tests for the jinja2 template renderer."""

import pytest

from adl.core.errors import BackendError, MalformedTemplateError
from adl.core.renderer import render


class TestRender:
    """Tests for markers, sections and errors."""

    def test_marker(self) -> None:
        """A marker is replaced by its argument."""
        assert render("Hello {{ name }}!", name="Ada") == "Hello Ada!"

    def test_literal_text_passes_through(self) -> None:
        """Python braces outside markers are left alone."""
        text = 'x = {"a": 1}\nprint(f"{x}")\n'
        assert render(text) == text

    def test_section_with_missing_argument_is_false(self) -> None:
        """A section on a missing argument is treated as false."""
        template = "{% if flag %}on{% endif %}{% if not flag %}off{% endif %}"
        assert render(template) == "off"
        assert render(template, flag=True) == "on"

    def test_section_lines_are_trimmed(self) -> None:
        """Section tags do not leave blank lines behind."""
        template = "a\n{% if flag %}\nb\n{% endif %}\nc\n"
        assert render(template, flag=True) == "a\nb\nc\n"
        assert render(template, flag=False) == "a\nc\n"

    def test_missing_marker_argument(self) -> None:
        """A marker without an argument raises MalformedTemplateError."""
        with pytest.raises(MalformedTemplateError, match="Template argument missing"):
            render("def {{ function_name }}():")

    def test_invalid_template(self) -> None:
        """Template syntax errors raise MalformedTemplateError."""
        with pytest.raises(MalformedTemplateError, match="Invalid template"):
            render("{% if %}")

    def test_malformed_template_is_a_backend_error(self) -> None:
        """Template errors are caught as backend errors."""
        with pytest.raises(BackendError):
            render("{{ missing }}")

    def test_no_autoescape(self) -> None:
        """Generated code is never HTML-escaped."""
        assert render("{{ code }}", code='"<b>" & x') == '"<b>" & x'
