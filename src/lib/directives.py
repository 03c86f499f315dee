"""
Directive tables and the directive rewriter

Every control-flow and utility directive is declared as a DirectiveSpec in
one of the built-in tables below. DirectiveRegistry owns those tables plus
the user's custom directives and rewrites a template table by table:

    conditional -> loop -> output -> custom -> token

All expression-taking directives share one scanning loop,
calls_rewrite(), which finds "@name(", pulls out the balanced argument
expression and splices in generated code.
"""

import re
from typing import Callable, Dict, List, Optional

from ..models.directives import DirectiveSpec, DirectiveKind, DirectiveCategory
from ..models.scanner import DirectiveMatch
from .scanner import expression_require
from .log import LOG


def _paired(name: str, open_template: str, close_template: Optional[str], description: str) -> DirectiveSpec:
    kind = DirectiveKind.PAIRED if close_template else DirectiveKind.EXPRESSION
    return DirectiveSpec(
        name=name,
        kind=kind,
        category=DirectiveCategory.CONDITIONAL,
        open_template=open_template,
        close_template=close_template,
        description=description,
    )


CONDITIONAL_DIRECTIVES: List[DirectiveSpec] = [
    _paired('if', 'if(%s):', 'endif;', 'Conditional block'),
    _paired('elseif', 'elseif(%s):', None, 'Else-if branch of @if'),
    _paired('unless', 'if(!(%s)):', 'endif;', 'Negated conditional block'),
    _paired('isset', 'if(isset(%s)):', 'endif;', 'Block shown when the variable is set'),
    _paired('empty', 'if(empty(%s)):', 'endif;', 'Block shown when the value is empty'),
    _paired('can', 'if(can(%s)):', 'endif;', 'Block shown when the ability is granted'),
    _paired('cannot', 'if(cannot(%s)):', 'endif;', 'Block shown when the ability is denied'),
    _paired('auth', 'if(!is_guest()):', 'endif;', 'Block shown to authenticated users'),
    _paired('guest', 'if(is_guest()):', 'endif;', 'Block shown to guests'),
    _paired('hasSection', 'if($this->hasSection(%s)):', 'endif;', 'Block shown when a section has content'),
    _paired('sectionMissing', 'if(!$this->hasSection(%s)):', 'endif;', 'Block shown when a section is missing'),
    _paired('session', 'if(session()->has(%s)):', 'endif;', 'Block shown when a session key exists'),
    _paired('switch', 'switch(%s):case 1.9996931348623157e+308:break;', 'endswitch;', 'Switch statement'),
]

LOOP_DIRECTIVES: List[DirectiveSpec] = [
    DirectiveSpec(
        name=name,
        kind=DirectiveKind.PAIRED,
        category=DirectiveCategory.LOOP,
        open_template=f'{name}(%s):',
        close_template=f'end{name};',
        description=f'{name} loop',
    )
    for name in ('foreach', 'for', 'while')
]

OUTPUT_DIRECTIVES: List[DirectiveSpec] = [
    DirectiveSpec(
        name=name,
        kind=DirectiveKind.EXPRESSION,
        category=DirectiveCategory.OUTPUT,
        open_template=code,
        description=description,
    )
    for name, code, description in [
        ('dump', 'dump(%s);', 'Debug dump'),
        ('dd', 'dd(%s);', 'Dump and die'),
        ('abort', 'abort(%s);', 'Abort with an HTTP status'),
        ('old', 'echo e(old(%s));', 'Echo escaped old form input'),
        ('share', '$this->share(%s);', 'Share a value with all views'),
        ('authorize', 'authorize(%s);', 'Authorization check'),
        ('json', r'echo \Spark\Support\Js::from(%s);', 'JSON serialization'),
        ('case', 'case %s:', 'Switch case'),
        ('vite', 'echo vite(%s);', 'Vite asset tags'),
        ('method', 'echo method(%s);', 'Form method spoofing field'),
        ('checked', "echo (%s) ? 'checked=\"true\"' : '';", 'checked attribute'),
        ('disabled', "echo (%s) ? 'disabled=\"true\"' : '';", 'disabled attribute'),
        ('selected', "echo (%s) ? 'selected=\"true\"' : '';", 'selected attribute'),
        ('readonly', "echo (%s) ? 'readonly=\"true\"' : '';", 'readonly attribute'),
        ('required', "echo (%s) ? 'required=\"true\"' : '';", 'required attribute'),
        ('style', "echo 'style=\"' . $this->compileStyleArray(%s) . '\"';", 'style attribute builder'),
        ('class', "echo 'class=\"' . $this->compileClassArray(%s) . '\"';", 'class attribute builder'),
        ('errors', 'if($errors->any() && $errors->has(%s)): foreach($errors->get(%s) as $message):',
         'Iterate the error messages of a field'),
        ('error', 'if($errors->any() && $errors->has(%s)): $message = $errors->first(%s);',
         'First error message of a field'),
    ]
]

TOKEN_DIRECTIVES: List[DirectiveSpec] = [
    DirectiveSpec(
        name=name,
        kind=DirectiveKind.TOKEN,
        category=DirectiveCategory.TOKEN,
        open_template=code,
    )
    for name, code in [
        ('break', '<?php break; ?>'),
        ('continue', '<?php continue; ?>'),
        ('default', '<?php default: ?>'),
        ('vite', '<?= vite(); ?>'),
        ('csrf', '<?= csrf(); ?>'),
        ('else', '<?php else: ?>'),
        ('endif', '<?php endif; ?>'),
        ('enderrors', '<?php endforeach; endif; ?>'),
        ('enderror', '<?php endif; ?>'),
    ]
]

# Order in which DirectiveRegistry.directives_compile() applies the tables
COMPILE_ORDER = [
    DirectiveCategory.CONDITIONAL,
    DirectiveCategory.LOOP,
    DirectiveCategory.OUTPUT,
    DirectiveCategory.CUSTOM,
    DirectiveCategory.TOKEN,
]

DIRECTIVE_NAME = re.compile(r"\w+")


def directive_find(template: str, name: str, offset: int = 0) -> Optional[DirectiveMatch]:
    """
    Find the next @name (whole word) at or after offset

    Returns:
        DirectiveMatch, with paren_position set if the name is followed by
        optional whitespace and "(", or None if there are no more occurrences
    """
    match = re.compile(rf"@{re.escape(name)}\b(\s*\()?").search(template, offset)
    if not match:
        return None

    position = match.start()
    end = position + len(name) + 1
    paren_position = match.end() - 1 if match.group(1) else None
    return DirectiveMatch(name=name, position=position, end=end, paren_position=paren_position)


def calls_rewrite(
    template: str,
    name: str,
    render: Callable[[str], Optional[str]],
    bare: Optional[Callable[[], Optional[str]]] = None,
) -> str:
    """
    Rewrite every @name(expression) invocation in template

    Scans left to right. For each invocation the balanced expression is
    extracted and render(expression) supplies the replacement for the whole
    "@name(expression)" span. The search resumes after the replacement, so
    generated code is never rescanned.

    Args:
        template: Template text
        name: Directive name (without @)
        render: Expression-to-code function; returning None leaves the
                invocation untouched
        bare: Optional replacement for @name written without parentheses;
              if omitted, bare occurrences are left untouched

    Returns:
        Rewritten template

    Raises:
        UnbalancedExpressionError: if an invocation has no matching ")"
    """
    offset = 0

    while True:
        match = directive_find(template, name, offset)
        if match is None:
            break

        if match.paren_position is None:
            replacement = bare() if bare else None
            span_end = match.end
        else:
            expression = expression_require(template, match.paren_position, name)
            replacement = render(expression)
            span_end = match.paren_position + len(expression) + 2

        if replacement is None:
            offset = match.end
            continue

        template = template[:match.position] + replacement + template[span_end:]
        offset = match.position + len(replacement)

    return template


def directive_rewrite(template: str, spec: DirectiveSpec) -> str:
    """
    Rewrite a PAIRED, EXPRESSION or CUSTOM directive

    Zero-argument directives (no expression slot, e.g. @auth) are also
    accepted bare. Paired directives additionally have every @end<name>
    replaced by their close code.

    Example:
        "@if($a > 1) big @endif" -> "<?php if($a > 1): ?> big <?php endif; ?>"
    """
    bare = None
    if not spec.expression_takes():
        bare = lambda: spec.open_render("")

    template = calls_rewrite(template, spec.name, spec.open_render, bare)

    close_code = spec.close_render()
    if close_code is not None:
        template = re.sub(rf"@end{re.escape(spec.name)}\b", lambda _: close_code, template)

    return template


def token_rewrite(template: str, spec: DirectiveSpec) -> str:
    """
    Whole-word substitution of @name with the directive's fixed code

    Example:
        "@foreach($a as $b) @break @endforeach" -> "... <?php break; ?> ..."
    """
    code = spec.open_render("")
    return re.sub(rf"@{re.escape(spec.name)}\b", lambda _: code, template)


def custom_rewrite(template: str, name: str, handler: Callable[[str], str]) -> str:
    """Rewrite @name(expression) with handler(expression)"""
    return calls_rewrite(template, name, handler)


def inlineCode_compile(template: str) -> str:
    """
    Compile single-expression inline PHP: @php($a = 1) -> <?php $a = 1; ?>

    Block form (@php ... @endphp) is preserved earlier and never reaches
    this pass.
    """
    return calls_rewrite(template, 'php', lambda expression: f"<?php {expression.strip()}; ?>")


class DirectiveRegistry:
    """
    Registry of directive specifications

    Holds the built-in tables (shared, built once at import) and the
    custom directives registered on this instance.
    """

    def __init__(self) -> None:
        """Initialize the registry with the built-in directive tables"""
        self.tables: Dict[DirectiveCategory, List[DirectiveSpec]] = {
            category: [] for category in COMPILE_ORDER
        }
        self.custom: Dict[str, DirectiveSpec] = {}
        for spec in CONDITIONAL_DIRECTIVES + LOOP_DIRECTIVES + OUTPUT_DIRECTIVES + TOKEN_DIRECTIVES:
            self.register(spec)

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification, replacing one of the same name and category"""
        if spec.kind is DirectiveKind.CUSTOM:
            self.custom[spec.name] = spec
            return

        table = self.tables[spec.category]
        table[:] = [existing for existing in table if existing.name != spec.name]
        table.append(spec)

    def directive_register(self, name: str, handler: Callable[[str], str]) -> None:
        """
        Register a custom directive

        handler receives the raw expression between the parentheses of
        @name(...) and returns the replacement text. A custom directive
        takes precedence over a built-in of the same name.

        Raises:
            ValueError: If name is not a plain word
        """
        if not DIRECTIVE_NAME.fullmatch(name):
            raise ValueError(f"Invalid directive name: '{name}'")

        self.register(DirectiveSpec(
            name=name,
            kind=DirectiveKind.CUSTOM,
            category=DirectiveCategory.CUSTOM,
            handler=handler,
            description='Custom directive',
        ))
        LOG(f"Registered custom directive @{name}", level=2)

    def get(self, name: str) -> Optional[DirectiveSpec]:
        """
        Get a directive specification by name

        Custom directives win, then built-ins in compile order.
        """
        if name in self.custom:
            return self.custom[name]

        for category in COMPILE_ORDER:
            for spec in self.tables[category]:
                if spec.name == name:
                    return spec

        return None

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directives in a category"""
        if category is DirectiveCategory.CUSTOM:
            return list(self.custom.values())
        return list(self.tables[category])

    def directives_compile(self, template: str) -> str:
        """
        Rewrite all control-flow and utility directives in template

        Tables are applied in COMPILE_ORDER. Built-ins shadowed by a custom
        directive of the same name are skipped.
        """
        for category in COMPILE_ORDER:
            for spec in self.directives_listByCategory(category):
                if category is not DirectiveCategory.CUSTOM and spec.name in self.custom:
                    continue

                if spec.kind is DirectiveKind.TOKEN:
                    template = token_rewrite(template, spec)
                elif spec.kind is DirectiveKind.CUSTOM:
                    assert spec.handler is not None
                    template = custom_rewrite(template, spec.name, spec.handler)
                else:
                    template = directive_rewrite(template, spec)

            LOG(f"Compiled {category.value} directives", level=3)

        return template
