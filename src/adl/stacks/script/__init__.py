"""Linear-script backend."""

from .generator import ScriptGenerator

__all__ = ["ScriptGenerator"]
