"""Shared pieces for ADL backends: visitor base, builtin registry, type mapping."""

from .builtins import BUILTIN_FUNCTIONS, helper_source_for, is_builtin, resolve_name
from .generator import BaseGenerator, GenerationContext

__all__ = [
    "BUILTIN_FUNCTIONS",
    "BaseGenerator",
    "GenerationContext",
    "helper_source_for",
    "is_builtin",
    "resolve_name",
]
