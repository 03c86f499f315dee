"""
Per-compilation state

A CompilationContext is created for every call to
BladeCompiler.string_compile() and threaded through the passes that need
it. Nothing in it outlives the compilation, so placeholders can never leak
from one template into another (or between threads).
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class CompilationContext:
    """
    Mutable state of a single compilation

    Attributes:
        name: Logical template name (for log messages), if known
        blocks: Preserved block table, placeholder token -> literal content.
                Verbatim and raw PHP blocks share this table; the next
                placeholder index is always len(blocks), so tokens are unique
                across both kinds.

    Example:
        After preserving "@verbatim{{ x }}@endverbatim @php $a = 1; @endphp":
        CompilationContext(
            name="<string>",
            blocks={
                "__VERBATIM_BLOCK_0__": "{{ x }}",
                "__RAW_BLOCK_1__": "<?php\\n    $a = 1;\\n?>",
            }
        )
    """
    name: str = "<string>"
    blocks: Dict[str, str] = field(default_factory=dict)

    def block_nextIndex(self) -> int:
        """Index for the next placeholder token"""
        return len(self.blocks)

    def block_store(self, token: str, content: str) -> str:
        """Store preserved content under token and return the token"""
        self.blocks[token] = content
        return token

    def blocks_clear(self) -> None:
        """Drop all preserved blocks (end of compilation)"""
        self.blocks.clear()
