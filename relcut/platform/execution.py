"""Execution mode controller.

A release session runs either in mock mode (the default) or for real.
Both modes build exactly the same commands; the difference is decided in
one place, the CommandRunner:

- local commands (git checkout/commit/tag, the build) always run;
- remote commands with a dry-run flag (git push) run with the flag added;
- other remote commands (uploads, registry pushes, hosting API writes)
  are logged and skipped, returning Ok("").
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from relcut.core.result import Ok, Result
from relcut.output.console import ConsoleProtocol, Style
from relcut.platform.process import ProcessError, run, run_streaming

__all__ = ["Command", "CommandRunner", "ExecutionMode"]


@dataclass(frozen=True, slots=True)
class ExecutionMode:
    mock: bool = True

    @property
    def label(self) -> str:
        return "mock" if self.mock else "real"


@dataclass(frozen=True, slots=True)
class Command:
    """An external call, described independently of the execution mode.

    Attributes:
        argv: Program and arguments.
        cwd: Working directory.
        remote: True if the command has effects outside the workspace.
        dry_run_flag: Flag that turns the command into a dry run; used
            instead of skipping a remote command in mock mode.
        env: Extra environment variables layered over os.environ.
        stream: Stream output to the terminal instead of capturing it.
        input: Text fed to stdin.
        timeout: Seconds before the call is abandoned (None: no limit).
    """

    argv: tuple[str, ...]
    cwd: Path
    remote: bool = False
    dry_run_flag: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    stream: bool = False
    input: str | None = None
    timeout: float | None = None

    def display(self) -> str:
        return shlex.join(self.argv)


@dataclass
class CommandRunner:
    """Single execution boundary for every external call."""

    mode: ExecutionMode
    console: ConsoleProtocol
    history: list[Command] = field(default_factory=list)

    def resolve(self, command: Command) -> Command | None:
        """Return the command that will actually execute, or None for a no-op."""
        if not command.remote or not self.mode.mock:
            return command
        if command.dry_run_flag is None:
            return None
        return Command(
            argv=(*command.argv, command.dry_run_flag),
            cwd=command.cwd,
            remote=True,
            env=command.env,
            stream=command.stream,
            input=command.input,
            timeout=command.timeout,
        )

    def run(self, command: Command) -> Result[str, ProcessError]:
        actual = self.resolve(command)
        if actual is None:
            self.console.print(f"[mock] skip: {command.display()}", Style.DIM)
            self.history.append(command)
            return Ok("")

        self.console.print(f"$ {actual.display()}", Style.DIM)
        self.history.append(actual)

        env: dict[str, str] | None = None
        if actual.env:
            env = {**os.environ, **actual.env}

        if actual.stream:
            return run_streaming(list(actual.argv), cwd=actual.cwd, env=env)
        return run(
            list(actual.argv),
            cwd=actual.cwd,
            env=env,
            input=actual.input,
            timeout=actual.timeout,
        )
