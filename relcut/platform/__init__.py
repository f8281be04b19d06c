"""Platform abstraction layer: subprocesses and execution mode."""

from .execution import Command, CommandRunner, ExecutionMode
from .process import ProcessError, run, run_streaming

__all__ = [
    # execution
    "Command",
    "CommandRunner",
    "ExecutionMode",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
