"""Templates shared by both backends."""

PRELUDE = '''# Generated by adlc. Do not edit.
import time
from types import SimpleNamespace
from typing import Any, Literal

from adl_runtime import MessageThread, StatelogClient, get_client
{% if graph %}
from adl_runtime import Graph
{% endif %}

_client_config = {"model": {{ default_model }}}
_ctx = SimpleNamespace(
    client=get_client(_client_config),
    messages=MessageThread(),
)
_statelog = StatelogClient({{ statelog_host }})


def _get_client_with_config(**overrides):
    _client_config.update(overrides)
    return get_client(_client_config)
'''

PROMPT_FUNCTION = '''def {{ function_name }}({{ parameters }}):
    prompt = {{ prompt }}
    _ctx.messages.add_user(prompt)
    response = _ctx.client.text(
        messages=_ctx.messages.get_messages(),
        response_schema={{ response_schema }},
{% if config %}
        config={{ config }},
{% endif %}
{% if tools %}
        tools={{ tools }},
{% endif %}
    )
    _ctx.messages.add_assistant(response.output)
    _statelog.log("prompt", {"prompt": prompt, "output": response.output})
    return response.output
'''
