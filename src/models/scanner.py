"""
Scanner-specific data models

Type-safe structures for directive lookup results.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class DirectiveMatch:
    """
    Result of finding a directive invocation in template text

    Attributes:
        name: The directive name (e.g., "if", "foreach", "includeWhen")
        position: Character position of the "@"
        end: Position just past the directive name
        paren_position: Position of the opening "(" of the argument list,
                        or None if the directive was written bare

    Example:
        For template "<p>@if ($a)</p>":
        DirectiveMatch(name="if", position=3, end=6, paren_position=7)
    """
    name: str
    position: int
    end: int
    paren_position: Optional[int] = None
