"""
Structural directives: imports, layout inheritance, sections and includes

These run before the control-flow tables, in the order

    @use -> @extends -> sections -> @yield -> includes

and are built on the same scanning loop as every other directive
(directives.calls_rewrite), with arguments split on top-level commas
(scanner.arguments_split). A directive whose arguments do not have the
expected shape (e.g. @extends($layout) instead of a quoted name) is left
in the template untouched.
"""

import re
from typing import List, Optional

from .directives import calls_rewrite
from .scanner import arguments_split, literal_is, literal_unquote
from .log import LOG

# A plain variable reference, the only kind of default isset() accepts
VARIABLE_REFERENCE = re.compile(r"^\$[a-zA-Z_]\w*(?:->[a-zA-Z_]\w*|\[[^\]'\"]*\])*$")

END_SECTION = "<?php $this->endSection(); ?>"
SHOW_SECTION = "<?php $this->endSection(); echo $this->yieldSection($this->getCurrentSection()); ?>"


def sectionName_get(arguments: List[str]) -> Optional[str]:
    """
    First argument as a section/layout name, or None if it is not a
    quote-free string literal
    """
    if not arguments or not literal_is(arguments[0]):
        return None
    name = literal_unquote(arguments[0])
    if "'" in name or '"' in name:
        return None
    return name


def use_compile(template: str) -> str:
    """
    Compile @use('Namespace\\Class') and @use('Namespace\\Class', 'Alias')

    Example:
        "@use('App\\Models\\User', 'U')" -> "<?php use App\\Models\\User as U; ?>"
    """

    def render(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        if not arguments:
            return None

        class_name = arguments[0].strip("'\"")
        if len(arguments) > 1:
            alias = arguments[1].strip("'\"")
            return f"<?php use {class_name} as {alias}; ?>"
        return f"<?php use {class_name}; ?>"

    return calls_rewrite(template, 'use', render)


def extends_compile(template: str) -> str:
    """Compile @extends('layouts.app') -> <?php $this->setExtends('layouts.app'); ?>"""

    def render(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        name = sectionName_get(arguments)
        if name is None or len(arguments) != 1:
            return None
        return f"<?php $this->setExtends('{name}'); ?>"

    return calls_rewrite(template, 'extends', render)


def sections_compile(template: str) -> str:
    """
    Compile @section, @endsection, @stop and @show

    Forms:
        @section('name')          -> start a section block
        @section('name', $value)  -> inline section: start, echo, end
        @endsection / @stop       -> end the current section
        @show                     -> end the current section and yield it
    """

    def render(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        name = sectionName_get(arguments)
        if name is None:
            return None

        if len(arguments) == 1:
            return f"<?php $this->startSection('{name}'); ?>"

        value = ", ".join(arguments[1:])
        return f"<?php $this->startSection('{name}'); echo {value}; $this->endSection(); ?>"

    template = calls_rewrite(template, 'section', render)
    template = re.sub(r"@(?:endsection|stop)\b", lambda _: END_SECTION, template)
    template = re.sub(r"@show\b", lambda _: SHOW_SECTION, template)
    return template


def yields_compile(template: str) -> str:
    """
    Compile @yield('name'[, default])

    The default may be a string literal (emitted quoted), a variable
    (guarded with isset()), or any other expression (passed through).

    Example:
        "@yield('title', $pageTitle)"
        -> "<?= $this->yieldSection('title', isset($pageTitle) ? $pageTitle : ''); ?>"
    """

    def render(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        name = sectionName_get(arguments)
        if name is None:
            return None

        if len(arguments) == 1:
            default = "''"
        else:
            value = ", ".join(arguments[1:])
            if literal_is(value):
                unquoted = literal_unquote(value)
                default = value if ("'" in unquoted or '"' in unquoted) else f"'{unquoted}'"
            elif VARIABLE_REFERENCE.match(value):
                default = f"isset({value}) ? {value} : ''"
            else:
                default = value

        return f"<?= $this->yieldSection('{name}', {default}); ?>"

    return calls_rewrite(template, 'yield', render)


def includes_compile(template: str) -> str:
    """
    Compile @includeWhen, @includeIf and @include

    Forms:
        @includeWhen($cond, 'view'[, $data])
        @includeIf('view'[, $data])       -> only if the view exists
        @include('view'[, $data])
    """

    def include_when(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        if len(arguments) < 2:
            return None
        condition, view = arguments[0], arguments[1]
        data = ", ".join(arguments[2:]) or "[]"
        return f"<?php if({condition}): echo $this->include({view}, {data}); endif; ?>"

    def include_if(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        if not arguments:
            return None
        view = arguments[0]
        data = ", ".join(arguments[1:]) or "[]"
        return f"<?php if($this->templateExists({view})): echo $this->include({view}, {data}); endif; ?>"

    def include(expression: str) -> Optional[str]:
        arguments = arguments_split(expression)
        if not arguments:
            return None
        view = arguments[0]
        data = ", ".join(arguments[1:]) or "[]"
        return f"<?= $this->include({view}, {data}); ?>"

    template = calls_rewrite(template, 'includeWhen', include_when)
    template = calls_rewrite(template, 'includeIf', include_if)
    template = calls_rewrite(template, 'include', include)
    LOG("Compiled include directives", level=3)
    return template
