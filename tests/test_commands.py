"""Tests for the command output adapter."""

from __future__ import annotations

import sys

import pytest

from sandboxscan.commands import CommandResult, CommandRunner, SubprocessExecutor
from sandboxscan.errors import CommandTransportError
from tests._fixtures.sandbox import SandboxSDKError


class _StaticExecutor:
    def __init__(self, result: CommandResult | Exception) -> None:
        self.result = result
        self.calls: list[tuple[str, list[str]]] = []

    def execute(self, command, args):  # type: ignore[no-untyped-def]
        self.calls.append((command, list(args)))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_runner_returns_non_zero_exit_without_raising() -> None:
    executor = _StaticExecutor(CommandResult(exit_code=1, stdout=lambda: "nope\n"))
    output = CommandRunner(executor).run("grep", ["-i", "x", "/tmp/a"])

    assert output.exit_code == 1
    assert output.ok is False
    assert output.text == "nope\n"
    assert executor.calls == [("grep", ["-i", "x", "/tmp/a"])]


def test_runner_read_text_is_none_on_failure() -> None:
    executor = _StaticExecutor(CommandResult(exit_code=2, stdout=lambda: ""))
    assert CommandRunner(executor).read_text("cat", ["/missing"]) is None


def test_runner_lines_drop_blank_entries() -> None:
    executor = _StaticExecutor(CommandResult(exit_code=0, stdout=lambda: "a\n\n  \nb\n"))
    assert CommandRunner(executor).run("find", ["."]).lines() == ["a", "b"]


@pytest.mark.parametrize(
    "exc",
    [TimeoutError("slow"), ConnectionError("reset"), OSError("gone"), SandboxSDKError("504")],
)
def test_runner_wraps_transport_failures(exc: Exception) -> None:
    runner = CommandRunner(_StaticExecutor(exc))
    with pytest.raises(CommandTransportError) as info:
        runner.run("cat", ["file"])
    assert info.value.command == "cat"
    assert info.value.__cause__ is exc


def test_runner_names_exceptions_without_a_message() -> None:
    runner = CommandRunner(_StaticExecutor(SandboxSDKError()))
    with pytest.raises(CommandTransportError, match="cat: SandboxSDKError"):
        runner.run("cat", ["file"])


def test_runner_wraps_failures_while_reading_stdout() -> None:
    def _broken() -> str:
        raise ConnectionError("stream closed")

    runner = CommandRunner(_StaticExecutor(CommandResult(exit_code=0, stdout=_broken)))
    with pytest.raises(CommandTransportError, match="stream closed"):
        runner.run("cat", ["file"])


def test_subprocess_executor_captures_stdout_and_exit_code(tmp_path) -> None:  # type: ignore[no-untyped-def]
    executor = SubprocessExecutor(cwd=tmp_path)
    ok = executor.execute(sys.executable, ["-c", "print('hello')"])
    failed = executor.execute(sys.executable, ["-c", "import sys; sys.exit(3)"])

    assert ok.exit_code == 0
    assert ok.stdout().strip() == "hello"
    assert failed.exit_code == 3


def test_subprocess_executor_reports_missing_binary() -> None:
    with pytest.raises(CommandTransportError):
        SubprocessExecutor().execute("definitely-not-a-real-binary-xyz", [])


def test_subprocess_executor_reports_timeout() -> None:
    executor = SubprocessExecutor(timeout=0.1)
    with pytest.raises(CommandTransportError, match="timed out"):
        executor.execute(sys.executable, ["-c", "import time; time.sleep(5)"])
