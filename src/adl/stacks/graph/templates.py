"""Templates for the execution-graph backend."""

GRAPH_SETUP = '''graph = Graph(name={{ name }}, debug={{ debug }})


def _node_args(state, count):
    data = state.get("data")
    if count == 0:
        return []
    args = list(data) if isinstance(data, (list, tuple)) else [data]
    return (args + [None] * count)[:count]
'''

ENTRY_POINT = '''def run_{{ node_name }}(*args, messages=None):
    if messages is not None:
        _ctx.messages = MessageThread(messages)
    state = graph.run({{ node_key }}, {"messages": _ctx.messages, "data": list(args)})
    return state.get("data")
'''

MAIN_BLOCK = '''if __name__ == "__main__":
{% if start_step %}
    graph.run({{ start_step }}, {"messages": _ctx.messages, "data": None})
{% elif entry_node %}
    print(run_{{ entry_node }}())
{% else %}
    pass
{% endif %}
'''

HARNESS = '''# Evaluation harness generated by adlc. Do not edit.
import json
import sys

from {{ module_name }} import run_{{ node_name }}

RESULT_FILE = {{ result_file }}


def run_evaluation(args):
    result = run_{{ node_name }}(*args)
    print("Evaluation result:", result)
    with open(RESULT_FILE, "w", encoding="utf-8") as f:
        json.dump({"node": {{ node_key }}, "args": args, "data": result}, f, indent=2, default=str)
    return result


if __name__ == "__main__":
    run_evaluation(json.loads(sys.argv[1]) if len(sys.argv) > 1 else {{ default_args }})
'''
