"""
Block preservation tests

@verbatim and @php ... @endphp blocks are swapped out for placeholder
tokens before any other pass and swapped back at the end.
"""

import pytest

from bladec.lib.blocks import verbatim_preserve, rawBlocks_preserve, blocks_restore
from bladec.models.context import CompilationContext


@pytest.fixture
def context():
    return CompilationContext()


class TestVerbatim:
    """Test @verbatim ... @endverbatim preservation"""

    def test_block_replaced_by_token(self, context):
        result = verbatim_preserve("<p>@verbatim{{ raw }}@endverbatim</p>", context)

        assert result == "<p>__VERBATIM_BLOCK_0__</p>"
        assert context.blocks == {"__VERBATIM_BLOCK_0__": "{{ raw }}"}

    def test_content_kept_exactly(self, context):
        """No trimming, no PHP tags"""
        verbatim_preserve("@verbatim\n  @if($x) {{ y }}\n@endverbatim", context)

        assert context.blocks["__VERBATIM_BLOCK_0__"] == "\n  @if($x) {{ y }}\n"

    def test_multiple_blocks_numbered(self, context):
        result = verbatim_preserve("@verbatim a @endverbatim|@verbatim b @endverbatim", context)

        assert result == "__VERBATIM_BLOCK_0__|__VERBATIM_BLOCK_1__"
        assert len(context.blocks) == 2

    def test_unclosed_left_alone(self, context):
        template = "@verbatim {{ x }}"
        assert verbatim_preserve(template, context) == template
        assert context.blocks == {}


class TestRawBlocks:
    """Test @php ... @endphp preservation"""

    def test_block_wrapped_and_trimmed(self, context):
        result = rawBlocks_preserve("@php $x = 1; @endphp", context)

        assert result == "__RAW_BLOCK_0__"
        assert context.blocks["__RAW_BLOCK_0__"] == "<?php\n    $x = 1;\n?>"

    def test_empty_block(self, context):
        rawBlocks_preserve("@php @endphp", context)
        assert context.blocks["__RAW_BLOCK_0__"] == "<?php ?>"

    def test_inline_form_not_a_block(self, context):
        """@php(...) belongs to the inline pass"""
        template = "@php($a = 1)"
        assert rawBlocks_preserve(template, context) == template
        assert context.blocks == {}

    def test_inline_then_block(self, context):
        """An inline @php(...) before a block does not swallow it"""
        result = rawBlocks_preserve("@php($a = 1) x @php $b = 2; @endphp", context)

        assert result == "@php($a = 1) x __RAW_BLOCK_0__"
        assert context.blocks["__RAW_BLOCK_0__"] == "<?php\n    $b = 2;\n?>"

    def test_indices_shared_with_verbatim(self, context):
        """Tokens stay unique across both block kinds"""
        template = verbatim_preserve("@verbatim v @endverbatim @php $p; @endphp", context)
        template = rawBlocks_preserve(template, context)

        assert template == "__VERBATIM_BLOCK_0__ __RAW_BLOCK_1__"


class TestRestore:
    """Test blocks_restore()"""

    def test_round_trip(self, context):
        template = "<p>@verbatim{{ raw }}@endverbatim</p>@php $a = 1; @endphp"
        template = verbatim_preserve(template, context)
        template = rawBlocks_preserve(template, context)

        assert blocks_restore(template, context) == "<p>{{ raw }}</p><?php\n    $a = 1;\n?>"

    def test_table_cleared(self, context):
        template = verbatim_preserve("@verbatim x @endverbatim", context)
        blocks_restore(template, context)

        assert context.blocks == {}

    def test_text_without_tokens_unchanged(self, context):
        assert blocks_restore("plain", context) == "plain"

    def test_verbatim_inside_raw_block(self, context):
        template = "@php $s = '@verbatim {{ x }} @endverbatim'; @endphp"
        template = verbatim_preserve(template, context)
        template = rawBlocks_preserve(template, context)

        assert template == "__RAW_BLOCK_1__"
        assert blocks_restore(template, context) == "<?php\n    $s = ' {{ x }} ';\n?>"
