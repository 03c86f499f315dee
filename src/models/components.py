"""
Component tag data models

Tagged attribute values produced while parsing <x-name ...> tags.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional


class AttributeKind(Enum):
    """
    How an attribute value is emitted into the component's attribute array
    """
    FLAG = "flag"                    # <x-alert dismissible>       -> true
    LITERAL = "literal"              # <x-alert type="error">      -> 'error'
    EXPRESSION = "expression"        # <x-alert :type="$kind">     -> $kind
    SLOT_TEXT = "slot_text"          # static slot body, pre-escaped
    SLOT_DEFERRED = "slot_deferred"  # dynamic slot body, output-capturing closure


@dataclass(frozen=True)
class ComponentAttribute:
    """
    One attribute value of a component tag

    Attributes:
        kind: How the value is emitted
        value: Literal text, expression source, or slot body.
               Ignored for FLAG.
    """
    kind: AttributeKind
    value: str = ""


@dataclass
class ComponentTag:
    """
    A resolved component tag

    Attributes:
        name: Component name after "x-" (e.g., "alert", "forms.input")
        attributes: Ordered attribute map; a later duplicate overwrites
                    an earlier one. The reserved key "slot" holds the body.
    """
    name: str
    attributes: Dict[str, ComponentAttribute] = field(default_factory=dict)

    @property
    def slot(self) -> Optional[ComponentAttribute]:
        return self.attributes.get("slot")
