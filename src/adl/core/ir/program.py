"""
Program root of the ADL AST.
"""

from __future__ import annotations

from collections import Counter
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .statements import AdlNode, FunctionDefinition, GraphNodeDefinition


class AdlProgram(BaseModel):
    """
    A parsed ADL source file.

    `nodes` keeps top-level statements in source order; emitted code
    follows the same order.
    """

    type: Literal["adlProgram"] = "adlProgram"
    nodes: list[AdlNode] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def functions(self) -> list[FunctionDefinition]:
        return [n for n in self.nodes if isinstance(n, FunctionDefinition)]

    @property
    def graph_nodes(self) -> list[GraphNodeDefinition]:
        return [n for n in self.nodes if isinstance(n, GraphNodeDefinition)]

    def get_graph_node(self, name: str) -> GraphNodeDefinition | None:
        for node in self.graph_nodes:
            if node.node_name == name:
                return node
        return None

    def tag_counts(self) -> dict[str, int]:
        """Count of top-level nodes per tag, for logging and diagnostics."""
        return dict(Counter(n.type for n in self.nodes))
