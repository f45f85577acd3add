"""Sandbox session lifecycle and the operations bound to it."""

from __future__ import annotations

import threading
from typing import Optional

from .commands import CommandExecutor, CommandRunner
from .config import ScanConfig
from .errors import NoActiveSessionError, SessionClosedError
from .logging import get_logger, get_session_logger
from .logs import LogMiner, LogStatusReader
from .manifest import ManifestAssembler, ManifestBuilder
from .models import FileManifest, LogErrorsReport, LogStatusReport, ManifestResult


class SandboxSession:
    """Owns the transport to one sandbox and the last manifest built from it.

    Use as a context manager, or call :meth:`close` explicitly; a closed
    session refuses to run further commands.
    """

    def __init__(
        self,
        executor: CommandExecutor,
        config: ScanConfig | None = None,
        *,
        assembler: ManifestAssembler | None = None,
        name: str = "sandbox",
    ) -> None:
        self.name = name
        self.config = config or ScanConfig()
        self._runner = CommandRunner(executor)
        self._assembler = assembler
        self._closed = False
        self.manifest: Optional[FileManifest] = None
        self.logger = get_session_logger("session", name)

    def __enter__(self) -> "SandboxSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def runner(self) -> CommandRunner:
        if self._closed:
            raise SessionClosedError(f"Session {self.name} is closed")
        return self._runner

    def close(self) -> None:
        if not self._closed:
            self.logger.debug("Closing session")
        self._closed = True
        self.manifest = None

    def build_manifest(self) -> ManifestResult:
        """Rebuild the file manifest and cache it on the session."""
        builder = ManifestBuilder(self.runner, self.config, assembler=self._assembler)
        result = builder.build()
        self.manifest = result.manifest
        self.logger.info(
            "Built manifest: %d files, %d skipped", result.file_count, len(result.skipped)
        )
        return result

    def mine_dependency_errors(self) -> LogErrorsReport:
        return LogMiner(self.runner, self.config.logs).mine()

    def read_log_status(self) -> LogStatusReport:
        return LogStatusReader(self.runner, self.config.logs).read()


class SessionRegistry:
    """Tracks the session the service currently operates on.

    Activating a session closes the one it replaces. The service clears the
    registry on shutdown and on ``DELETE /session``.
    """

    def __init__(self, session: SandboxSession | None = None) -> None:
        self._lock = threading.Lock()
        self._session = session
        self.logger = get_logger("session")

    def activate(self, session: SandboxSession) -> None:
        with self._lock:
            previous, self._session = self._session, session
        self.logger.info("Active sandbox: %s", session.name)
        if previous is not None and previous is not session:
            previous.close()

    def clear(self) -> None:
        with self._lock:
            previous, self._session = self._session, None
        if previous is not None:
            self.logger.info("Released sandbox: %s", previous.name)
            previous.close()

    def current(self) -> Optional[SandboxSession]:
        with self._lock:
            return self._session

    def require(self) -> SandboxSession:
        session = self.current()
        if session is None:
            raise NoActiveSessionError()
        return session


__all__ = ["SandboxSession", "SessionRegistry"]
