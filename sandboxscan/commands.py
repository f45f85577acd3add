"""Command execution seam between sandboxscan and the sandbox transport."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from .errors import CommandTransportError
from .logging import COMMANDS_CHANNEL, get_logger


@dataclass(frozen=True)
class CommandResult:
    """Raw result handed back by an executor.

    ``stdout`` is a callable so remote transports can stream output lazily.
    """

    exit_code: int
    stdout: Callable[[], str]


class CommandExecutor(Protocol):
    """Contract for transports that run a command inside the sandbox."""

    def execute(self, command: str, args: Sequence[str]) -> CommandResult:
        ...


@dataclass(frozen=True)
class CommandOutput:
    """Decoded output of a finished command."""

    command: str
    args: tuple[str, ...]
    exit_code: int
    text: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def lines(self) -> list[str]:
        """Return non-blank output lines in order."""
        return [line for line in self.text.split("\n") if line.strip()]


class SubprocessExecutor:
    """Runs commands on the local machine, for development and the CLI."""

    def __init__(self, cwd: Path | str | None = None, timeout: Optional[float] = 30.0) -> None:
        self.cwd = str(cwd) if cwd is not None else None
        self.timeout = timeout

    def execute(self, command: str, args: Sequence[str]) -> CommandResult:
        try:
            completed = subprocess.run(
                [command, *args],
                cwd=self.cwd,
                text=True,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandTransportError(command, f"timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise CommandTransportError(command, str(exc)) from exc

        output = completed.stdout or ""
        return CommandResult(exit_code=completed.returncode, stdout=lambda: output)


class CommandRunner:
    """Issues commands one at a time and decodes their output.

    A non-zero exit code is returned to the caller untouched. Anything the
    executor raises, whatever its type, surfaces as
    :class:`CommandTransportError` with the original chained as the cause.
    """

    def __init__(self, executor: CommandExecutor) -> None:
        self._executor = executor
        self.logger = get_logger(COMMANDS_CHANNEL)

    def run(self, command: str, args: Sequence[str]) -> CommandOutput:
        arguments = tuple(str(arg) for arg in args)
        self.logger.debug("Running %s %s", command, " ".join(arguments))
        try:
            result = self._executor.execute(command, list(arguments))
            text = result.stdout()
        except CommandTransportError:
            raise
        except Exception as exc:  # executors raise their own SDK errors
            raise CommandTransportError(command, str(exc) or exc.__class__.__name__) from exc

        if text is None:
            text = ""
        elif isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        output = CommandOutput(
            command=command,
            args=arguments,
            exit_code=int(result.exit_code),
            text=text,
        )
        if not output.ok:
            self.logger.debug("%s exited with %d", command, output.exit_code)
        return output

    def read_text(self, command: str, args: Sequence[str]) -> Optional[str]:
        """Return stdout when the command succeeds, ``None`` otherwise."""
        output = self.run(command, args)
        return output.text if output.ok else None


__all__ = [
    "CommandExecutor",
    "CommandOutput",
    "CommandResult",
    "CommandRunner",
    "SubprocessExecutor",
]
