"""
CLI pipeline tests

Runs the pipeline stages of the bladec command on a temporary template
tree: env_check -> cache_prepare -> templates_discover -> templates_compile
-> results_report
"""

import tempfile
from argparse import Namespace
from pathlib import Path

import pytest

from bladec.__main__ import (
    env_check,
    cache_prepare,
    templates_discover,
    templates_compile,
    results_report,
)
from bladec.lib.compiler import BladeCompiler
from bladec.models import ProgramState, pipeline


LAYOUT = """<html>
<title>@yield('title', 'Site')</title>
<body>@yield('content')</body>
</html>"""

HOME = """@extends('layouts.app')
@section('title', 'Home')
@section('content')
    <x-alert type="info">{{ $message }}</x-alert>
@endsection"""


@pytest.fixture
def tree():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        views = root / "views"
        (views / "layouts").mkdir(parents=True)
        (views / "layouts" / "app.blade.php").write_text(LAYOUT, encoding="utf-8")
        (views / "home.blade.php").write_text(HOME, encoding="utf-8")
        (views / "README.md").write_text("not a template", encoding="utf-8")
        yield root


def state_make(root: Path, **options) -> ProgramState:
    return ProgramState(inputdir=root / "views", outputdir=root / "out", **options)


def run(state: ProgramState) -> ProgramState:
    return pipeline(state, env_check, cache_prepare, templates_discover, templates_compile, results_report)


class TestStateCreation:
    """Test ProgramState construction from CLI options"""

    def test_from_namespace(self, tree):
        options = Namespace(pattern="*.blade.php", directives=None, force=True,
                            clear=False, verbosity=2, unrelated="ignored")
        state = ProgramState.state_createFromNamespace(options, tree / "views", tree / "out")

        assert state.pattern == "*.blade.php"
        assert state.force is True
        assert state.verbosity == 2
        assert state.inputdir == tree / "views"
        assert not hasattr(state, "unrelated")


class TestEnvCheck:
    """Test env_check stage"""

    def test_builds_compiler(self, tree):
        state = env_check(state_make(tree))

        assert state.envOK
        assert isinstance(state.compiler, BladeCompiler)
        assert (tree / "out").is_dir()

    def test_missing_inputdir_exits(self, tree):
        state = ProgramState(inputdir=tree / "missing", outputdir=tree / "out")

        with pytest.raises(SystemExit) as exc_info:
            env_check(state)
        assert exc_info.value.code == 1

    def test_directive_file_relative_to_inputdir(self, tree):
        (tree / "views" / "directives.yaml").write_text('upper: "<?= strtoupper(%s); ?>"\n')
        state = env_check(state_make(tree, directives="directives.yaml"))

        assert state.compiler.string_compile("@upper($a)") == "<?= strtoupper($a); ?>"

    def test_bad_directive_file_exits(self, tree):
        with pytest.raises(SystemExit) as exc_info:
            env_check(state_make(tree, directives=str(tree / "nope.yaml")))
        assert exc_info.value.code == 1

    def test_input_state_not_mutated(self, tree):
        initial = state_make(tree)
        env_check(initial)

        assert initial.compiler is None
        assert not initial.envOK


class TestDiscovery:
    """Test templates_discover stage"""

    def test_default_pattern(self, tree):
        state = templates_discover(env_check(state_make(tree)))
        names = [path.relative_to(tree / "views").as_posix() for path in state.templateFiles]

        assert names == ["home.blade.php", "layouts/app.blade.php"]

    def test_custom_pattern(self, tree):
        state = templates_discover(env_check(state_make(tree, pattern="layouts/*.blade.php")))
        assert len(state.templateFiles) == 1

    def test_no_match_exits(self, tree):
        with pytest.raises(SystemExit):
            templates_discover(env_check(state_make(tree, pattern="*.twig")))


class TestCompileStage:
    """Test templates_compile stage and the full pipeline"""

    def test_first_run_compiles_all(self, tree):
        state = run(state_make(tree))
        result = state.compileResult

        assert result["compiled"] == ["home", "layouts.app"]
        assert result["skipped"] == []
        for output in result["outputs"].values():
            assert Path(output).exists()

    def test_compiled_content(self, tree):
        state = run(state_make(tree))
        home = Path(state.compileResult["outputs"]["home"]).read_text(encoding="utf-8")

        assert home.startswith("<?php $this->setExtends('layouts.app'); ?>")
        assert "$this->component('alert', ['type' => 'info', 'slot' => (function()" in home
        assert "<?= e($message); ?>" in home

    def test_output_named_by_cache(self, tree):
        state = run(state_make(tree))
        expected = BladeCompiler(cache_path=tree / "out").compiledPath_get("layouts.app")

        assert state.compileResult["outputs"]["layouts.app"] == str(expected)

    def test_second_run_skips(self, tree):
        run(state_make(tree))
        result = run(state_make(tree)).compileResult

        assert result["compiled"] == []
        assert result["skipped"] == ["home", "layouts.app"]

    def test_force(self, tree):
        run(state_make(tree))
        result = run(state_make(tree, force=True)).compileResult

        assert result["compiled"] == ["home", "layouts.app"]

    def test_clear(self, tree):
        run(state_make(tree))
        state = run(state_make(tree, clear=True))

        assert state.clearedCount == 2
        assert state.compileResult["compiled"] == ["home", "layouts.app"]

    def test_runtime_methods(self, tree):
        result = run(state_make(tree)).compileResult

        assert {"setExtends", "startSection", "endSection", "yieldSection", "component"} <= set(
            result["runtime_methods"]
        )
        assert result["unknown_methods"] == []

    def test_unknown_runtime_method_reported(self, tree):
        (tree / "views" / "odd.blade.php").write_text("@php $this->frobnicate(); @endphp")
        result = run(state_make(tree)).compileResult

        assert result["unknown_methods"] == ["frobnicate"]

    def test_compile_error_exits(self, tree, capsys):
        (tree / "views" / "broken.blade.php").write_text("<p>\n@if($a\n</p>")

        with pytest.raises(SystemExit) as exc_info:
            run(state_make(tree))

        assert exc_info.value.code == 1
        assert "broken.blade.php" in capsys.readouterr().err


class TestReport:
    """Test results_report stage"""

    def test_missing_result_exits(self, tree):
        with pytest.raises(SystemExit):
            results_report(state_make(tree))
