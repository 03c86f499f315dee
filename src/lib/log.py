"""
Loguru logging gated by pipeline verbosity

LOG() reads the verbosity of the ProgramState connected to the current
context, so compiler passes can log without being handed the state.
Messages logged while a template is being compiled carry its name in the
"template" column.

Verbosity resolution:
    - connected ProgramState: its verbosity
    - no state, BLADEC_DEBUG_MODE=true: everything (library debugging)
    - no state otherwise: nothing, so library callers get silent passes

Usage:
    from bladec.lib.log import LOG, state_connectToLogger, template_logContext

    state_connectToLogger(state)
    LOG("Compiling templates...", level=1)

    with template_logContext("layouts.app"):
        LOG("raw blocks preserved: 2", level=3)
"""

import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

from loguru import logger

from ..config import appsettings

_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<magenta>{extra[template]: <16}</magenta> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.configure(extra={"template": "-"})
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_current() -> int:
    """Verbosity in effect for the current context"""
    state = _program_state.get()
    if state is not None and hasattr(state, 'verbosity'):
        return state.verbosity
    return 3 if appsettings.debug_mode else 0


@contextmanager
def template_logContext(name: str) -> Iterator[None]:
    """Tag every LOG() inside the block with a template name"""
    with logger.contextualize(template=name):
        yield


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if the current verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Compile and cache operations (-v)
        3 = Individual passes (-vv or higher)
    """
    if verbosity_current() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
