"""
Data models for bladec

Directive specifications, component tags, per-compilation context, the
runtime contract and the command-line pipeline state.
"""

from .state import ProgramState, CompileReport, pipeline
from .directives import DirectiveSpec, DirectiveKind, DirectiveCategory, EXPRESSION_SLOT
from .context import CompilationContext
from .components import AttributeKind, ComponentAttribute, ComponentTag
from .scanner import DirectiveMatch
from .runtime import RUNTIME_METHODS, RUNTIME_FUNCTIONS, runtimeMethod_is

__all__ = [
    "ProgramState",
    "CompileReport",
    "pipeline",
    "DirectiveSpec",
    "DirectiveKind",
    "DirectiveCategory",
    "EXPRESSION_SLOT",
    "CompilationContext",
    "AttributeKind",
    "ComponentAttribute",
    "ComponentTag",
    "DirectiveMatch",
    "RUNTIME_METHODS",
    "RUNTIME_FUNCTIONS",
    "runtimeMethod_is",
]
