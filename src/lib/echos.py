"""
Comments and echo interpolation

Comments are stripped before anything else; echoes are compiled after
every directive and component pass, so markers generated by those passes
are never rewritten twice.
"""

import re

COMMENT_PATTERN = re.compile(r"\{\{--.*?--\}\}", re.DOTALL)
RAW_ECHO_PATTERN = re.compile(r"\{!!\s*(.+?)\s*!!\}", re.DOTALL)
ESCAPED_ECHO_PATTERN = re.compile(r"\{\{\s*(.+?)\s*\}\}", re.DOTALL)


def comments_strip(template: str) -> str:
    """Remove {{-- ... --}} comments (idempotent)"""
    return COMMENT_PATTERN.sub("", template)


def echos_compile(template: str) -> str:
    """
    Compile echo markers

    Raw echoes are emitted as-is; escaped echoes go through e().

    Example:
        "{!! $html !!} {{ $name }}" -> "<?= $html; ?> <?= e($name); ?>"
    """
    template = RAW_ECHO_PATTERN.sub(lambda match: f"<?= {match.group(1)}; ?>", template)
    template = ESCAPED_ECHO_PATTERN.sub(
        lambda match: f"<?= e({match.group(1).strip()}); ?>", template
    )
    return template
