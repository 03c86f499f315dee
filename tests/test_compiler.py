"""
End-to-end compilation tests

Tests the full pass sequence: template text -> BladeCompiler.string_compile -> PHP

Validates that complete templates mixing layouts, directives, components
and echoes compile to the expected PHP.
"""

import tempfile

import pytest

from bladec.config import appsettings
from bladec.lib.compiler import BladeCompiler
from bladec.lib.scanner import UnbalancedExpressionError
from bladec.models.runtime import RUNTIME_FUNCTIONS


@pytest.fixture
def compiler():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield BladeCompiler(cache_path=tmpdir)


class TestCompilationProperties:
    """Core guarantees of the compiler"""

    def test_if_guards_content(self, compiler):
        """The condition is copied exactly, including quoted parentheses"""
        result = compiler.string_compile("@if($user->can('edit (own)')) <b>edit</b> @endif")
        assert result == "<?php if($user->can('edit (own)')): ?> <b>edit</b> <?php endif; ?>"

    def test_verbatim_is_literal(self, compiler):
        assert compiler.string_compile("@verbatim{{ not-an-expr }}@endverbatim") == "{{ not-an-expr }}"

    def test_verbatim_directives_untouched(self, compiler):
        result = compiler.string_compile("@verbatim @if($x) <x-a/> @endif @endverbatim")
        assert result == " @if($x) <x-a/> @endif "

    def test_php_block(self, compiler):
        assert compiler.string_compile("@php $x = 1; @endphp") == "<?php\n    $x = 1;\n?>"

    def test_php_block_content_not_compiled(self, compiler):
        result = compiler.string_compile("@php $s = '{{ x }}'; @endphp")
        assert result == "<?php\n    $s = '{{ x }}';\n?>"

    def test_verbatim_inside_php_block_restored(self, compiler):
        result = compiler.string_compile("@php $s = '@verbatim {{ x }} @endverbatim'; @endphp")

        assert result == "<?php\n    $s = ' {{ x }} ';\n?>"
        assert appsettings.blockToken_pattern().search(result) is None

    def test_inline_php(self, compiler):
        assert compiler.string_compile("@php($count = 0)") == "<?php $count = 0; ?>"

    def test_single_escape_call(self, compiler):
        """Echoes inside directives are compiled exactly once"""
        result = compiler.string_compile("@if(true){{ $x }}@endif")

        assert result == "<?php if(true): ?><?= e($x); ?><?php endif; ?>"
        assert result.count("e($x)") == 1

    def test_comments_removed(self, compiler):
        assert compiler.string_compile("a{{-- @if($broken --}}b") == "ab"

    def test_nested_components(self, compiler):
        result = compiler.string_compile("<x-outer><x-inner/></x-outer>")
        assert result == (
            "<?= $this->component('outer', ['slot' => (function() { ob_start(); ?>"
            "<?= $this->component('inner', []); ?>"
            "<?php return ob_get_clean(); })()]); ?>"
        )

    def test_custom_directive(self, compiler):
        compiler.directive_register("upper", lambda expr: f"<?= strtoupper({expr}); ?>")
        assert compiler.string_compile("<h1>@upper($title)</h1>") == (
            "<h1><?= strtoupper($title); ?></h1>"
        )

    def test_unrecognized_syntax_passes_through(self, compiler):
        template = "Contact: admin@example.com, @unknown, {{ unterminated"
        assert compiler.string_compile(template) == template

    def test_unbalanced_raises(self, compiler):
        with pytest.raises(UnbalancedExpressionError) as exc_info:
            compiler.string_compile("<p>ok</p>\n@foreach($items as $item\n@endforeach")

        assert exc_info.value.directive == "foreach"
        assert exc_info.value.line_number == 2

    def test_compilations_independent(self, compiler):
        """Each call starts with an empty block table"""
        template = "@verbatim {{ a }} @endverbatim"
        first = compiler.string_compile(template)
        second = compiler.string_compile(template)

        assert first == second == " {{ a }} "


class TestComponentsWithOtherPasses:
    """Component slots interacting with directives, echoes and blocks"""

    def test_echo_in_slot(self, compiler):
        result = compiler.string_compile("<x-alert>{{ $msg }}</x-alert>")
        assert result == (
            "<?= $this->component('alert', ['slot' => (function() { ob_start(); ?>"
            "<?= e($msg); ?><?php return ob_get_clean(); })()]); ?>"
        )

    def test_directive_in_slot(self, compiler):
        result = compiler.string_compile("<x-card>@if($a) yes @endif</x-card>")

        assert "ob_start(); ?><?php if($a): ?> yes <?php endif; ?><?php return ob_get_clean();" in result

    def test_verbatim_in_slot_restored(self, compiler):
        """A preserved block inside a slot is deferred, then restored"""
        result = compiler.string_compile("<x-code>@verbatim{{ raw }}@endverbatim</x-code>")
        assert result == (
            "<?= $this->component('code', ['slot' => (function() { ob_start(); ?>"
            "{{ raw }}<?php return ob_get_clean(); })()]); ?>"
        )

    def test_component_inside_loop(self, compiler):
        result = compiler.string_compile(
            '@foreach($users as $user)<x-avatar :user="$user" size="32"/>@endforeach'
        )
        assert result == (
            "<?php foreach($users as $user): ?>"
            "<?= $this->component('avatar', ['user' => $user, 'size' => 32]); ?>"
            "<?php endforeach; ?>"
        )


class TestRuntimeHelpers:
    """Global helpers called by generated code belong to the runtime contract"""

    @pytest.mark.parametrize(
        "template, helper",
        [
            ("{{ $name }}", "e"),
            ("@csrf", "csrf"),
            ("@vite", "vite"),
            ("@old('email')", "old"),
            ("@method('PUT')", "method"),
            ("@dump($user)", "dump"),
            ("@abort(404)", "abort"),
            ("@authorize('edit')", "authorize"),
            ("@can('edit') x @endcan", "can"),
            ("@guest x @endguest", "is_guest"),
            ("@session('status') x @endsession", "session"),
            ("@json($data)", r"\Spark\Support\Js::from"),
        ],
    )
    def test_helper_in_contract(self, compiler, template, helper):
        result = compiler.string_compile(template)

        assert f"{helper}(" in result
        assert helper in RUNTIME_FUNCTIONS


class TestFullTemplates:
    """Complete page templates"""

    def test_child_template(self, compiler):
        template = """@extends('layouts.app')

@section('title', 'Posts')

@section('content')
    @forelse
    @foreach($posts as $post)
        <h2>{{ $post->title }}</h2>
        {!! $post->body !!}
    @endforeach
    @include('partials.pager', ['page' => $page])
@endsection
"""
        result = compiler.string_compile(template)

        assert result.startswith("<?php $this->setExtends('layouts.app'); ?>")
        assert "<?php $this->startSection('title'); echo 'Posts'; $this->endSection(); ?>" in result
        assert "<?php $this->startSection('content'); ?>" in result
        assert "<?php foreach($posts as $post): ?>" in result
        assert "<h2><?= e($post->title); ?></h2>" in result
        assert "<?= $post->body; ?>" in result
        assert "<?php endforeach; ?>" in result
        assert "<?= $this->include('partials.pager', ['page' => $page]); ?>" in result
        assert "<?php $this->endSection(); ?>" in result
        # not a known directive
        assert "@forelse" in result
        assert "@" not in result.replace("@forelse", "")

    def test_layout_template(self, compiler):
        template = """<html>
<head><title>@yield('title', 'My Site')</title>@vite</head>
<body>
    @auth
        <x-nav.user :user="auth()->user()"/>
    @endauth
    @hasSection('sidebar')
        @yield('sidebar')
    @endhasSection
    @yield('content')
    <form method="POST">@csrf @method('DELETE')</form>
</body>
</html>"""
        result = compiler.string_compile(template)

        assert "<title><?= $this->yieldSection('title', 'My Site'); ?></title><?= vite(); ?>" in result
        assert "<?php if(!is_guest()): ?>" in result
        assert "<?= $this->component('nav.user', ['user' => auth()->user()]); ?>" in result
        assert "<?php if($this->hasSection('sidebar')): ?>" in result
        assert "<?= $this->yieldSection('sidebar', ''); ?>" in result
        assert "<?= csrf(); ?> <?php echo method('DELETE'); ?>" in result
        assert result.count("<?php endif; ?>") == 2
