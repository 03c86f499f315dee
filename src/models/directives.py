"""
Directive specification and metadata models

Defines the shape of a template directive (paired block, single
expression, zero-argument token, or user handler) so that the built-in
tables can be declared once, at import time, as plain data.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Callable, Optional


# Slot in open/close templates that receives the extracted expression
EXPRESSION_SLOT = "%s"


class DirectiveKind(Enum):
    """
    How a directive is located and rewritten
    """
    PAIRED = "paired"            # @if(expr) ... @endif
    EXPRESSION = "expression"    # @dump(expr)
    TOKEN = "token"              # @break, @csrf
    CUSTOM = "custom"            # registered handler(expr) -> code


class DirectiveCategory(Enum):
    """
    Built-in directive tables, in the order they are compiled
    """
    CONDITIONAL = "conditional"  # @if, @isset, @auth, @switch ...
    LOOP = "loop"                # @foreach, @for, @while
    OUTPUT = "output"            # @dump, @json, @checked, @error ...
    CUSTOM = "custom"            # user registered
    TOKEN = "token"              # @break, @else, @csrf ...


@dataclass(frozen=True)
class DirectiveSpec:
    """
    Specification for a template directive

    Attributes:
        name: Directive name (without leading @)
        kind: How the directive is located and rewritten
        category: Table the directive belongs to
        open_template: Code emitted for @name(expr); every EXPRESSION_SLOT
                       is replaced by the extracted expression. For TOKEN
                       directives this is the full replacement text.
        close_template: Code emitted for @end<name>, if the directive is paired
        description: Human-readable description
        handler: Expression-to-code function for CUSTOM directives
    """
    name: str
    kind: DirectiveKind
    category: DirectiveCategory
    open_template: str = ""
    close_template: Optional[str] = None
    description: str = ""
    handler: Optional[Callable[[str], str]] = None

    def expression_takes(self) -> bool:
        """True if the open template has a slot for an expression"""
        return self.kind is DirectiveKind.CUSTOM or EXPRESSION_SLOT in self.open_template

    def open_render(self, expression: str) -> str:
        """
        Render the code for one @name(expression) invocation.

        CUSTOM directives return the handler's text verbatim and TOKEN
        directives their fixed replacement; every other kind is wrapped in
        <?php ... ?>.
        """
        if self.kind is DirectiveKind.CUSTOM:
            assert self.handler is not None
            return self.handler(expression)
        if self.kind is DirectiveKind.TOKEN:
            return self.open_template
        return f"<?php {self.open_template.replace(EXPRESSION_SLOT, expression)} ?>"

    def close_render(self) -> Optional[str]:
        """Render the code for @end<name>, or None if not paired"""
        if self.close_template is None:
            return None
        return f"<?php {self.close_template} ?>"
