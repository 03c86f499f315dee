"""
bladec - Blade-style template compiler

Compiles Blade-style templates (directives, echoes, component tags) to
plain PHP.
"""

__version__ = "1.0.0"

from .lib import (
    BladeCompiler,
    DirectiveRegistry,
    DirectiveFile,
    DirectiveFileError,
    UnbalancedExpressionError,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "BladeCompiler",
    "DirectiveRegistry",
    "DirectiveFile",
    "DirectiveFileError",
    "UnbalancedExpressionError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
