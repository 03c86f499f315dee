"""
Component tag rewriter

Turns <x-name ...> tags into component invocations:

    <x-alert type="error" :message="$msg" dismissible/>
    -> <?= $this->component('alert', ['type' => 'error', 'message' => $msg, 'dismissible' => true]); ?>

Nested tags are resolved innermost-first by iterating to a fixpoint: each
round rewrites self-closing tags, then content-bearing tags whose body
contains no other <x- tag. An outer tag therefore only matches once all of
its children have become PHP, and its body is then captured as a deferred
slot that is evaluated at render time.
"""

import re
from typing import Dict, Optional

from ..config import appsettings
from ..models.components import AttributeKind, ComponentAttribute, ComponentTag
from .log import LOG

COMPONENT_NAME = r"[a-zA-Z0-9\-_.]+"

# The name ends where whitespace or the end of the tag begins
NAME_END = r"(?=[\s/>])"

# Attribute text up to the end of the tag; quoted values may contain ">"
COMPONENT_ATTRIBUTES = r"((?:\"[^\"]*\"|'[^']*'|[^'\">])*?)"

SELF_CLOSING_PATTERN = re.compile(rf"<x-({COMPONENT_NAME}){NAME_END}{COMPONENT_ATTRIBUTES}/>")

# Body may not contain another component tag, opening or closing
WITH_CONTENT_PATTERN = re.compile(
    rf"<x-({COMPONENT_NAME}){NAME_END}{COMPONENT_ATTRIBUTES}>"
    rf"((?:(?!<x-{COMPONENT_NAME}|</x-{COMPONENT_NAME}>).)*)"
    rf"</x-\1>",
    re.DOTALL,
)

# name, name="v", name='v', :name="expr", :$name
ATTRIBUTE_PATTERN = re.compile(
    r"""(?:^|\s+)(:)?\$?([\w\-]+)(?:=(["'])((?:\\.|(?!\3).)*)\3)?""",
    re.DOTALL,
)

ECHO_MARKERS = re.compile(r"\{\{.*?\}\}|\{!!.*?!!\}", re.DOTALL)
DIRECTIVE_MARKER = re.compile(r"@[a-zA-Z]+")

# Value shapes emitted unquoted even when written as a plain attribute
EXPRESSION_SHAPES = [
    re.compile(r"\$[a-zA-Z_]\w*(?:->[a-zA-Z_]\w*|\[[^\]]*\])*"),  # $user->name, $items['a']
    re.compile(r"[a-zA-Z_]\w*\s*\(.*\)"),                           # route('home')
    re.compile(r"\[.*\]"),                                          # ['a', 'b']
    re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"),   # 42, -1.5e3
]
EXPRESSION_WORDS = {"true", "false", "null"}


def php_addslashes(text: str) -> str:
    """Escape backslash, quotes and NUL the way PHP's addslashes() does"""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\x00", "\\0")
    )


def expression_looksLike(value: str) -> bool:
    """
    Heuristic: does a literal attribute value look like PHP code?

    Matches a variable (with ->property / [index] chains), a function
    call, an array literal, a numeric literal, or true/false/null.
    Anything else is treated as a string.
    """
    value = value.strip()
    if value.lower() in EXPRESSION_WORDS:
        return True
    return any(shape.fullmatch(value) for shape in EXPRESSION_SHAPES)


def attributes_parse(text: str) -> Dict[str, ComponentAttribute]:
    """
    Parse the attribute text of a component tag

    Args:
        text: Everything between the tag name and ">" (or "/>")

    Returns:
        Ordered attribute map; later duplicates overwrite earlier ones

    Example:
        Input: 'type="error" :message="$msg" :$user dismissible'
        Output: {
            "type": ComponentAttribute(LITERAL, "error"),
            "message": ComponentAttribute(EXPRESSION, "$msg"),
            "user": ComponentAttribute(EXPRESSION, "$user"),
            "dismissible": ComponentAttribute(FLAG),
        }
    """
    attributes: Dict[str, ComponentAttribute] = {}
    text = text.strip()
    if not text:
        return attributes

    for match in ATTRIBUTE_PATTERN.finditer(text):
        dynamic, name, _, raw_value = match.groups()

        if dynamic:
            value = raw_value if raw_value is not None else f"${name}"
            attributes[name] = ComponentAttribute(AttributeKind.EXPRESSION, value)
        elif raw_value is not None:
            attributes[name] = ComponentAttribute(AttributeKind.LITERAL, raw_value)
        else:
            attributes[name] = ComponentAttribute(AttributeKind.FLAG)

    return attributes


def dynamic_contains(content: str) -> bool:
    """
    Check if slot content must be evaluated at render time

    True if it holds PHP tags, echo markers, directive markers, or a
    preserved block placeholder.
    """
    if "<?php" in content or "<?=" in content:
        return True
    if ECHO_MARKERS.search(content):
        return True
    if DIRECTIVE_MARKER.search(content):
        return True
    return bool(appsettings.blockToken_pattern().search(content))


def slot_escape(content: str) -> str:
    """Collapse whitespace and escape for a single-quoted PHP string"""
    content = re.sub(r"\s+", " ", content).strip()
    return content.replace("\\", "\\\\").replace("'", "\\'")


def slot_process(body: str) -> Optional[ComponentAttribute]:
    """
    Turn a tag body into the value of the reserved "slot" attribute

    Returns:
        None for an empty body, SLOT_DEFERRED for dynamic content,
        SLOT_TEXT (already escaped) for static text
    """
    body = body.strip()
    if not body:
        return None

    if dynamic_contains(body):
        return ComponentAttribute(AttributeKind.SLOT_DEFERRED, body)

    return ComponentAttribute(AttributeKind.SLOT_TEXT, slot_escape(body))


def attributeValue_render(attribute: ComponentAttribute) -> str:
    """Render one attribute value as a PHP expression"""
    kind = attribute.kind

    if kind is AttributeKind.FLAG:
        return "true"
    if kind is AttributeKind.EXPRESSION:
        return attribute.value if attribute.value.strip() else "null"
    if kind is AttributeKind.SLOT_TEXT:
        return f"'{attribute.value}'"
    if kind is AttributeKind.SLOT_DEFERRED:
        return f"(function() {{ ob_start(); ?>{attribute.value}<?php return ob_get_clean(); }})()"

    if expression_looksLike(attribute.value):
        return attribute.value
    return f"'{php_addslashes(attribute.value)}'"


def attributes_build(attributes: Dict[str, ComponentAttribute]) -> str:
    """
    Build the PHP array literal passed to the component

    Example:
        {"type": LITERAL "error", "count": LITERAL "3", "open": FLAG}
        -> "['type' => 'error', 'count' => 3, 'open' => true]"
    """
    if not attributes:
        return "[]"

    pairs = [
        f"'{php_addslashes(key)}' => {attributeValue_render(attribute)}"
        for key, attribute in attributes.items()
    ]
    return "[" + ", ".join(pairs) + "]"


def tag_compile(tag: ComponentTag) -> str:
    """Compile a resolved component tag to its invocation"""
    slot = tag.slot
    LOG(f"<x-{tag.name}> slot: {slot.kind.value if slot is not None else 'none'}", level=3)
    return f"<?= $this->component('{tag.name}', {attributes_build(tag.attributes)}); ?>"


def selfClosing_compile(template: str) -> str:
    """Compile every <x-name ... /> tag"""

    def compile_match(match: re.Match[str]) -> str:
        tag = ComponentTag(name=match.group(1), attributes=attributes_parse(match.group(2)))
        return tag_compile(tag)

    return SELF_CLOSING_PATTERN.sub(compile_match, template)


def withContent_compile(template: str) -> str:
    """Compile every <x-name ...>body</x-name> whose body holds no other component tag"""

    def compile_match(match: re.Match[str]) -> str:
        tag = ComponentTag(name=match.group(1), attributes=attributes_parse(match.group(2)))
        slot = slot_process(match.group(3))
        if slot is not None:
            tag.attributes["slot"] = slot
        return tag_compile(tag)

    return WITH_CONTENT_PATTERN.sub(compile_match, template)


def components_compile(template: str) -> str:
    """
    Resolve all component tags, innermost first, until nothing changes

    Tags that never match either pattern (e.g. a missing closing tag) are
    left in place as literal text.
    """
    rounds = 0
    previous = None
    while template != previous:
        previous = template
        template = selfClosing_compile(template)
        template = withContent_compile(template)
        rounds += 1

    LOG(f"Components resolved in {rounds} round(s)", level=3)
    return template
