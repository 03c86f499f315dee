"""
Block preservation and restoration

Before any other pass runs, @verbatim ... @endverbatim and
@php ... @endphp blocks are lifted out of the template and replaced by
placeholder tokens, so later regex passes never see their content. Once
every other pass is done the tokens are swapped back.

    Input:    "<p>@verbatim{{ raw }}@endverbatim</p>@php $a = 1; @endphp"
    Preserve: "<p>__VERBATIM_BLOCK_0__</p>__RAW_BLOCK_1__"
    Restore:  "<p>{{ raw }}</p><?php\n    $a = 1;\n?>"
"""

import re

from ..config import appsettings
from ..models.context import CompilationContext
from .log import LOG

VERBATIM_PATTERN = re.compile(r"@verbatim(.*?)@endverbatim", re.DOTALL)

# @php(...) is the inline form, handled by directives.inlineCode_compile()
RAW_PATTERN = re.compile(r"@php\b(?!\s*\()(.*?)@endphp", re.DOTALL)


def verbatim_preserve(template: str, context: CompilationContext) -> str:
    """
    Replace verbatim blocks with placeholders

    Content is stored exactly as written (no PHP tags, no trimming).

    Args:
        template: Template text (comments already stripped)
        context: Per-compilation block table

    Returns:
        Template with each block replaced by __VERBATIM_BLOCK_<n>__
    """

    def block_store(match: re.Match[str]) -> str:
        token = appsettings.verbatimToken_make(context.block_nextIndex())
        return context.block_store(token, match.group(1))

    result = VERBATIM_PATTERN.sub(block_store, template)
    LOG(f"verbatim blocks preserved: {len(context.blocks)}", level=3)
    return result


def rawBlocks_preserve(template: str, context: CompilationContext) -> str:
    """
    Replace @php ... @endphp blocks with placeholders

    The block body is trimmed and wrapped in PHP tags; an empty body
    collapses to an empty PHP block.

    Args:
        template: Template text (verbatim blocks already preserved)
        context: Per-compilation block table

    Returns:
        Template with each block replaced by __RAW_BLOCK_<n>__
    """

    def block_store(match: re.Match[str]) -> str:
        token = appsettings.rawToken_make(context.block_nextIndex())
        body = match.group(1).strip()
        code = f"<?php\n    {body}\n?>" if body else "<?php ?>"
        return context.block_store(token, code)

    before = len(context.blocks)
    result = RAW_PATTERN.sub(block_store, template)
    LOG(f"raw blocks preserved: {len(context.blocks) - before}", level=3)
    return result


def blocks_restore(template: str, context: CompilationContext) -> str:
    """
    Substitute every preserved block back and clear the table

    Tokens are restored newest first. A raw block preserved after a
    verbatim block may hold that block's token, which only becomes
    visible once the raw block is back in place.
    """
    for token, content in reversed(list(context.blocks.items())):
        template = template.replace(token, content)
    context.blocks_clear()
    return template
