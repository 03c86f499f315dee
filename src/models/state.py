"""
Command-line state and the stage pipeline

ProgramState is handed from stage to stage by pipeline(); every stage
copies it, fills in its own fields and returns the copy.
"""

import dataclasses
from argparse import Namespace
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type, TypeVar, TypedDict, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.compiler import BladeCompiler


PS = TypeVar("PS", bound="ProgramState")


class CompileReport(TypedDict):
    """What templates_compile did, keyed by logical template name"""
    compiled: List[str]
    skipped: List[str]
    outputs: Dict[str, str]
    runtime_methods: List[str]
    unknown_methods: List[str]


@dataclass
class ProgramState:
    """
    State carried through the bladec command pipeline

    Stage           Fields it sets
    --------------  -----------------------------------
    (options)       inputdir, outputdir, verbosity, pattern,
                    directives, force, clear
    env_check       compiler, envOK
    cache_prepare   clearedCount
    templates_discover  templateFiles
    templates_compile   compileResult
    results_report  (none)

    Attributes:
        pattern: Template glob relative to inputdir ("" means the
                 configured template_glob)
        directives: YAML file of custom directives, if any
        force: Recompile even up-to-date templates
        clear: Empty the compiled-template cache first
        compiler: BladeCompiler whose cache is outputdir
        clearedCount: Compiled files deleted by --clear
        templateFiles: Templates found by templates_discover
        compileResult: Report from templates_compile
    """

    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    pattern: str = field(default="")
    directives: Optional[str] = field(default=None)
    force: bool = field(default=False)
    clear: bool = field(default=False)

    envOK: bool = field(default=False)
    compiler: Optional["BladeCompiler"] = field(default=None)
    clearedCount: int = field(default=0)
    templateFiles: List[Path] = field(default_factory=list)
    compileResult: Optional[CompileReport] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type[PS], options: Namespace, inputdir: Path, outputdir: Path
    ) -> PS:
        """
        Build the initial state from parsed CLI options.

        Options that are not ProgramState fields are dropped; inputdir
        and outputdir always come from the arguments.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        options_known = {k: v for k, v in vars(options).items() if k in known}
        return cls(**{**options_known, "inputdir": inputdir, "outputdir": outputdir})

    def copy(self: PS) -> PS:
        """Shallow copy (the compiler and file list are shared)"""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run stages in order, feeding each the state returned by the last.

    Example:
        pipeline(state, env_check, templates_discover, templates_compile)
        == templates_compile(templates_discover(env_check(state)))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
