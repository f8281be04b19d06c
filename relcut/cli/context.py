from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relcut.core.config import DEFAULT_CONFIG_NAME, Config, load_config
from relcut.core.errors import ErrorCode
from relcut.core.result import Err
from relcut.output.console import ConsoleProtocol, RichConsole
from relcut.output.transcript import TranscriptConsole, open_transcript


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    transcript: Path | None


def _load(config_path: Path | None) -> Config:
    path = config_path or Path.cwd() / DEFAULT_CONFIG_NAME
    if config_path is None and not path.exists():
        return Config()

    result = load_config(path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.FATAL))
    return result.value


def build_context(config_path: Path | None = None) -> CLIContext:
    config = _load(config_path)

    console: ConsoleProtocol = RichConsole()
    transcript: Path | None = None
    try:
        logger, transcript = open_transcript(config.log)
    except OSError as e:
        typer.echo(f"warning: transcript disabled: {e}", err=True)
    else:
        console = TranscriptConsole(console, logger)

    return CLIContext(config=config, console=console, transcript=transcript)
