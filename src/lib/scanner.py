"""
Balanced-expression scanner

Extracts the argument expression of a directive invocation such as
@if($user->can('edit (own)')) by walking forward from the opening
parenthesis and tracking nesting depth. String literals are honoured, so
parentheses inside '...' or "..." never affect depth, and a backslash
escapes exactly the next character.

Example:
    >>> expression_extractBalanced("@x((a),(b))", 2)
    '(a),(b)'
    >>> expression_extractBalanced("@x(a", 2) is None
    True
"""

from typing import List, Optional

QUOTES = ("'", '"')
OPENERS = "([{"
CLOSERS = ")]}"


class UnbalancedExpressionError(SyntaxError):
    """
    Raised when a directive's argument list has no matching ")"

    Fatal to the current compilation: no partial output is produced.

    Attributes:
        directive: Directive or tag name whose arguments are unbalanced
        position: Character position of the opening "(" in the template
                  being compiled (after comment stripping and block
                  preservation)
        line_number: 1-based line of position
        context: Up to 40 characters either side of position
    """

    def __init__(self, directive: str, template: str = "", position: int = 0) -> None:
        self.directive = directive
        self.position = position
        self.line_number = template.count("\n", 0, position) + 1

        context_start = max(0, position - 40)
        context_end = min(len(template), position + 40)
        self.context = template[context_start:context_end]

        message = f"Unbalanced parentheses in @{directive} directive"
        if template:
            message = (
                f"{message}\n"
                f"Line {self.line_number}, position {position}\n"
                f"Context: ...{self.context}...\n"
                f"         {' ' * (position - context_start)}^"
            )
        super().__init__(message)


def expression_extractBalanced(text: str, paren_index: int) -> Optional[str]:
    """
    Extract the expression between a "(" and its matching ")"

    Args:
        text: Template text
        paren_index: Position of the opening parenthesis

    Returns:
        Text strictly between the matched parentheses, or None if
        text[paren_index] is not "(" or the end of text is reached with
        depth still positive

    Example:
        For text "@if(strlen(')') > 0)" and paren_index 3:
        Returns "strlen(')') > 0" - the ")" inside the quotes is ignored

        Depth tracking: (1 strlen(2 ')' )1 > 0 )0
    """
    if paren_index >= len(text) or text[paren_index] != "(":
        return None

    depth = 0
    quote: Optional[str] = None
    escaped = False

    for index in range(paren_index, len(text)):
        char = text[index]

        if escaped:
            escaped = False
            continue

        if char == "\\":
            escaped = True
            continue

        if char in QUOTES:
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
            continue

        if quote is not None:
            continue

        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[paren_index + 1:index]

    return None


def expression_require(text: str, paren_index: int, directive: str) -> str:
    """
    Like expression_extractBalanced(), but unbalanced input is fatal

    Raises:
        UnbalancedExpressionError: naming the offending directive
    """
    expression = expression_extractBalanced(text, paren_index)
    if expression is None:
        raise UnbalancedExpressionError(directive, text, paren_index)
    return expression


def arguments_split(expression: str) -> List[str]:
    """
    Split an argument expression on top-level commas

    Commas inside string literals or nested (), [] or {} are not
    separators. Each argument is stripped; an empty expression has no
    arguments.

    Example:
        >>> arguments_split("'partials.row', ['items' => f($a, $b)]")
        ["'partials.row'", "['items' => f($a, $b)]"]
    """
    if not expression.strip():
        return []

    arguments: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    escaped = False

    for char in expression:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif quote is not None:
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        elif char == "," and depth == 0:
            arguments.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    arguments.append("".join(current).strip())
    return arguments


def literal_is(argument: str) -> bool:
    """True if argument is a single- or double-quoted string literal"""
    argument = argument.strip()
    return (
        len(argument) >= 2
        and argument[0] in QUOTES
        and argument[-1] == argument[0]
        and expression_isSingleLiteral(argument)
    )


def expression_isSingleLiteral(argument: str) -> bool:
    """Check that the opening quote of argument is closed only at its end"""
    quote = argument[0]
    escaped = False
    for index in range(1, len(argument)):
        char = argument[index]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == quote:
            return index == len(argument) - 1
    return False


def literal_unquote(argument: str) -> str:
    """Strip the surrounding quotes of a string literal (no unescaping)"""
    argument = argument.strip()
    if literal_is(argument):
        return argument[1:-1]
    return argument
