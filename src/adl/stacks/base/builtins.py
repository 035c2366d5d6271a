"""
Builtin function registry.

Maps ADL builtin names to the Python names generated code calls, and
supplies the helper definitions some of them need. Helpers are emitted
once per program, in registry order, however often a builtin is used.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ...core.errors import InvalidConfigurationError


@dataclass(frozen=True)
class Builtin:
    adl_name: str
    python_name: str
    helper: str | None = None


_INPUT_HELPER = '''def _builtin_input(prompt=""):
    return input(prompt)
'''

_READ_HELPER = '''def _builtin_read(path):
    with open(path, encoding="utf-8") as f:
        return f.read()
'''

_WRITE_HELPER = '''def _builtin_write(path, content):
    with open(path, "w", encoding="utf-8") as f:
        f.write(str(content))
    return True
'''

_READ_IMAGE_HELPER = '''def _builtin_read_image(path):
    import base64
    import mimetypes

    mime_type = mimetypes.guess_type(path)[0] or "image/png"
    with open(path, "rb") as f:
        data = base64.b64encode(f.read()).decode("ascii")
    return {"type": "image", "mime_type": mime_type, "data": data}
'''

_FETCH_HELPER = '''def _builtin_fetch(url):
    import urllib.request

    with urllib.request.urlopen(url) as response:
        return response.read().decode("utf-8")
'''

_FETCH_JSON_HELPER = '''def _builtin_fetch_json(url):
    import json
    import urllib.request

    with urllib.request.urlopen(url) as response:
        return json.loads(response.read().decode("utf-8"))
'''

# Order here is the order helpers appear in generated code
BUILTINS: tuple[Builtin, ...] = (
    Builtin("print", "print"),
    Builtin("input", "_builtin_input", _INPUT_HELPER),
    Builtin("read", "_builtin_read", _READ_HELPER),
    Builtin("write", "_builtin_write", _WRITE_HELPER),
    Builtin("readImage", "_builtin_read_image", _READ_IMAGE_HELPER),
    Builtin("fetch", "_builtin_fetch", _FETCH_HELPER),
    Builtin("fetchJSON", "_builtin_fetch_json", _FETCH_JSON_HELPER),
    Builtin("fetchJson", "_builtin_fetch_json", _FETCH_JSON_HELPER),
    Builtin("sleep", "time.sleep"),
)

BUILTIN_FUNCTIONS: dict[str, str] = {b.adl_name: b.python_name for b in BUILTINS}


def is_builtin(name: str) -> bool:
    return name in BUILTIN_FUNCTIONS


def resolve_name(name: str) -> str:
    """Python name for an ADL builtin; any other name is returned unchanged."""
    return BUILTIN_FUNCTIONS.get(name, name)


def helper_source_for(used_names: Iterable[str]) -> str:
    """
    Concatenate helper definitions for the given builtins.

    Args:
        used_names: ADL builtin names seen during generation

    Returns:
        Helper source in registry order, each helper exactly once. Empty
        when no used builtin needs one.

    Raises:
        InvalidConfigurationError: If a name is not a registered builtin
    """
    used = set(used_names)
    unknown = sorted(used - BUILTIN_FUNCTIONS.keys())
    if unknown:
        raise InvalidConfigurationError(f"Not a builtin function: {', '.join(unknown)}")

    emitted: set[str] = set()
    helpers = []
    for builtin in BUILTINS:
        if builtin.adl_name not in used or builtin.helper is None:
            continue
        if builtin.python_name in emitted:
            continue
        emitted.add(builtin.python_name)
        helpers.append(builtin.helper)
    return "\n\n".join(helpers)
