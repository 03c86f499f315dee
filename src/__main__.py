#!/usr/bin/env python3
"""
bladec - Blade-style template compiler

Compiles a tree of Blade-style templates (directives, echoes, component
tags) into plain PHP files ready for a rendering runtime.

The command line is a ChRIS "plugin" (inputdir -> outputdir), so the same
entry point runs standalone or inside a ChRIS pipeline.

Philosophy:
    - Text in, text out: the compiler never executes a template
    - One compiled file per template, cached by logical name
    - Only stale templates are recompiled
    - Unrecognized syntax passes through as literal text

Usage:
    bladec inputdir/ outputdir/

    Every template under inputdir matching --pattern is compiled into
    outputdir, which acts as the compiled-template cache.

Examples:
    # Compile all *.blade.php templates
    bladec views/ storage/views/

    # Rebuild everything from scratch
    bladec views/ storage/views/ --clear --force

    # With custom directives and verbose output
    bladec views/ storage/views/ --directives directives.yaml -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import BladeCompiler, DirectiveFile, DirectiveFileError, UnbalancedExpressionError
from .lib import __version__, LOG, state_connectToLogger
from .lib.lexer import source_highlight
from .models import ProgramState, CompileReport, pipeline, runtimeMethod_is


DISPLAY_TITLE = r"""
   _     _           _
  | |__ | | __ _  __| | ___  ___
  | '_ \| |/ _` |/ _` |/ _ \/ __|
  | |_) | | (_| | (_| |  __/ (__
  |_.__/|_|\__,_|\__,_|\___|\___|

  Blade-style template compiler
"""

# Define CLI arguments
parser = ArgumentParser(
    description="bladec - compile Blade-style templates to PHP",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default=appsettings.template_glob,
    type=str,
    help="Glob (relative to inputdir) selecting the templates to compile",
)

parser.add_argument(
    "--directives",
    default=None,
    type=str,
    help="YAML file of custom directives (name: php template with %%s)",
)

parser.add_argument(
    "--force",
    action="store_true",
    help="Recompile templates even if their compiled file is up to date",
)

parser.add_argument(
    "--clear",
    action="store_true",
    help="Delete previously compiled files in outputdir before compiling",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def directivesPath_resolve(state: ProgramState) -> Path:
    """
    Locate the directive file: as given, else relative to inputdir
    """
    path = Path(state.directives)
    if not path.is_absolute() and not path.exists() and state.inputdir is not None:
        candidate = state.inputdir / path
        if candidate.exists():
            return candidate
    return path


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and build the compiler.

    Verifies that the input directory exists, creates the output directory
    (the compiled-template cache) and registers any custom directives.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - compiler: BladeCompiler writing into outputdir
            - envOK: True if environment is valid

    Exits:
        1 if inputdir is missing or the directive file cannot be loaded
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Input directory: {state.inputdir}", level=2)

    state.compiler = BladeCompiler(cache_path=state.outputdir)
    LOG(f"Output directory: {state.outputdir}", level=2)

    if state.directives:
        try:
            directive_file = DirectiveFile(directivesPath_resolve(state))
            directive_file.registerInto(state.compiler)
        except DirectiveFileError as e:
            print(f"Error: {e}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)

    state.envOK = True
    return state


def cache_prepare(inputstate: ProgramState) -> ProgramState:
    """
    Clear previously compiled files when --clear is given.

    Returns:
        ProgramState with added field:
            - clearedCount: Number of compiled files deleted
    """

    state = inputstate.copy()

    if state.clear:
        LOG("Clearing compiled templates...", level=1)
        state.clearedCount = state.compiler.cache_clear()

    return state


def templates_discover(inputstate: ProgramState) -> ProgramState:
    """
    Find the templates to compile.

    Returns:
        ProgramState with added field:
            - templateFiles: Sorted template paths under inputdir

    Exits:
        1 if the pattern matches nothing
    """

    state = inputstate.copy()
    pattern = state.pattern or appsettings.template_glob

    LOG(f"Discovering templates ({pattern})...", level=1)
    state.templateFiles = sorted(path for path in state.inputdir.glob(pattern) if path.is_file())

    if not state.templateFiles:
        print(f"Error: No templates matching '{pattern}' in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Found {len(state.templateFiles)} template(s)", level=2)
    return state


def error_report(error: UnbalancedExpressionError, template_file: Path) -> None:
    """Print a compile error with a highlighted excerpt of the offending template"""
    print(f"Compilation error in {template_file}: @{error.directive}", file=sys.stderr)
    print(f"  Line {error.line_number}: unbalanced parentheses", file=sys.stderr)
    print(source_highlight(error.context), file=sys.stderr)


def templates_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile every stale template (or all of them with --force).

    Each template's logical name is its path relative to inputdir, dotted
    and without the template suffix (layouts/app.blade.php -> layouts.app).

    Returns:
        ProgramState with added field:
            - compileResult: CompileReport with:
                - compiled: List[str] logical names that were compiled
                - skipped: List[str] logical names already up to date
                - outputs: Dict[str, str] logical name -> compiled file
                - runtime_methods: List[str] $this-> methods the output calls
                - unknown_methods: List[str] of those outside the runtime contract

    Exits:
        1 on a compilation error (no output is written for that template)
    """

    state = inputstate.copy()
    compiler: BladeCompiler = state.compiler

    LOG("Compiling templates...", level=1)

    compiled: list[str] = []
    skipped: list[str] = []
    outputs: dict[str, str] = {}
    runtime_methods: set[str] = set()

    for template_file in state.templateFiles:
        name = appsettings.templateName_make(template_file.relative_to(state.inputdir))
        compiled_path = compiler.compiledPath_get(name)
        stale = state.force or compiler.expired_is(template_file, compiled_path)

        try:
            compiled_path = compiler.template_ensureCompiled(template_file, name, force=state.force)
        except UnbalancedExpressionError as e:
            error_report(e, template_file)
            sys.exit(1)
        except OSError as e:
            print(f"Error compiling {template_file}: {e}", file=sys.stderr)
            sys.exit(1)

        (compiled if stale else skipped).append(name)
        outputs[name] = str(compiled_path)
        runtime_methods |= compiler.runtimeCalls_find(compiled_path.read_text(encoding="utf-8"))

    state.compileResult = CompileReport(
        compiled=compiled,
        skipped=skipped,
        outputs=outputs,
        runtime_methods=sorted(runtime_methods),
        unknown_methods=sorted(m for m in runtime_methods if not runtimeMethod_is(m)),
    )
    LOG(f"Compiled {len(compiled)}, skipped {len(skipped)}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results to user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None
    """
    state: ProgramState = inputstate.copy()
    if state.compileResult is None:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    result = state.compileResult
    LOG("\n✓ Compilation successful!", level=1)
    if state.clear:
        LOG(f"  Cleared:  {state.clearedCount}", level=1)
    LOG(f"  Compiled: {len(result['compiled'])}", level=1)
    LOG(f"  Skipped:  {len(result['skipped'])} (up to date)", level=1)
    LOG(f"  Output:   {state.outputdir}", level=1)

    for name in result["compiled"]:
        LOG(f"    {name} -> {result['outputs'][name]}", level=2)

    if result["runtime_methods"]:
        LOG(f"  Runtime methods: {', '.join(result['runtime_methods'])}", level=2)
    if result["unknown_methods"]:
        LOG(f"  Warning: not in runtime contract: {', '.join(result['unknown_methods'])}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="bladec - Blade-style template compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile a directory of templates to PHP.

    Orchestrates the full compilation pipeline:
        1. env_check: Validate paths, build compiler, load directives
        2. cache_prepare: Optionally clear the compiled-template cache
        3. templates_discover: Find templates matching --pattern
        4. templates_compile: Compile stale templates
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - pattern: str - Template glob relative to inputdir
            - directives: Optional[str] - YAML file of custom directives
            - force: bool - Recompile everything
            - clear: bool - Empty the cache first
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing template sources
        outputdir: Directory where compiled templates will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    # Execute compilation pipeline
    pipeline(state, env_check, cache_prepare, templates_discover, templates_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
