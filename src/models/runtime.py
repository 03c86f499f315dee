"""
Rendering runtime contract

The compiler never executes its output. Compiled templates call into a
rendering runtime through `$this->method(...)` and a handful of global
helper functions; this module names that surface so generated code can be
checked against it.
"""

from typing import FrozenSet


# Methods invoked on the view object ($this) by generated code
RUNTIME_METHODS: FrozenSet[str] = frozenset({
    'setExtends',          # @extends
    'startSection',        # @section
    'endSection',          # @endsection, @stop, @show
    'yieldSection',        # @yield, @show
    'hasSection',          # @hasSection, @sectionMissing
    'getCurrentSection',   # @show
    'include',             # @include, @includeIf, @includeWhen
    'templateExists',      # @includeIf
    'component',           # <x-...> tags
    'share',               # @share
    'compileStyleArray',   # @style
    'compileClassArray',   # @class
})

# Global helpers invoked by generated code
RUNTIME_FUNCTIONS: FrozenSet[str] = frozenset({
    'e',                   # {{ }} and @old escaping
    'vite',
    'csrf',
    'old',
    'method',
    'dump',
    'dd',
    'abort',
    'authorize',
    'can',
    'cannot',
    'is_guest',
    'session',
    r'\Spark\Support\Js::from',  # @json
})


def runtimeMethod_is(name: str) -> bool:
    """Check if a $this-> method is part of the runtime contract"""
    return name in RUNTIME_METHODS
