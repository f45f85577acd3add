"""Exception hierarchy shared across sandboxscan pipelines."""

from __future__ import annotations


class SandboxScanError(RuntimeError):
    """Base class for failures that abort a sandboxscan operation."""


class NoActiveSessionError(SandboxScanError):
    """Raised when no sandbox session is available to run commands against."""

    def __init__(self, message: str = "No active sandbox") -> None:
        super().__init__(message)


class SessionClosedError(SandboxScanError):
    """Raised when a closed session is asked to execute commands."""


class CommandTransportError(SandboxScanError):
    """Raised when a command could not be delivered or its output was lost."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason


class DiscoveryError(SandboxScanError):
    """Raised when the sandbox file listing itself fails."""


__all__ = [
    "CommandTransportError",
    "DiscoveryError",
    "NoActiveSessionError",
    "SandboxScanError",
    "SessionClosedError",
]
