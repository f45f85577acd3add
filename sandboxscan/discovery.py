"""Sandbox file discovery and size-gated content retrieval."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Union

from .commands import CommandRunner
from .config import ScanConfig
from .errors import CommandTransportError, DiscoveryError
from .logging import get_logger
from .models import Retrieved, Skipped

RetrievalOutcome = Union[Retrieved, Skipped]

SKIP_TOO_LARGE = "too-large"
SKIP_STAT_FAILED = "stat-failed"
SKIP_BAD_SIZE = "bad-size"
SKIP_READ_FAILED = "read-failed"
SKIP_TRANSPORT = "transport-error"


def normalize_path(path: str) -> str:
    """Strip the leading ``./`` that ``find .`` prefixes to every result."""
    return path[2:] if path.startswith("./") else path


def build_find_files_args(pruned_dirs: Sequence[str], extensions: Sequence[str]) -> List[str]:
    args: List[str] = ["."]
    for name in pruned_dirs:
        args.extend(["-name", name, "-prune", "-o"])
    args.extend(["-type", "f", "("])
    for index, extension in enumerate(extensions):
        if index:
            args.append("-o")
        args.extend(["-name", f"*{extension}"])
    args.extend([")", "-print"])
    return args


def build_find_dirs_args(excludes: Sequence[str]) -> List[str]:
    args: List[str] = [".", "-type", "d"]
    for name in excludes:
        args.extend(["-not", "-path", f"*/{name}*"])
    return args


class FileDiscovery:
    """Lists, filters and fetches project files through a command runner."""

    def __init__(self, runner: CommandRunner, config: ScanConfig | None = None) -> None:
        self._runner = runner
        self.config = config or ScanConfig()
        self.logger = get_logger("discovery")

    def discover(self) -> List[str]:
        """Return candidate file paths as printed by ``find``.

        Any failure here aborts the manifest build; there is no partial listing.
        """
        args = build_find_files_args(self.config.pruned_dirs, self.config.extensions)
        try:
            output = self._runner.run("find", args)
        except CommandTransportError as exc:
            raise DiscoveryError(f"Failed to list files: {exc}") from exc
        if not output.ok:
            raise DiscoveryError("Failed to list files")
        paths = output.lines()
        self.logger.info("Found %d files", len(paths))
        return paths

    def retrieve(self, paths: Iterable[str]) -> List[RetrievalOutcome]:
        """Fetch content for every path under the size threshold."""
        return [self.retrieve_one(path) for path in paths]

    def retrieve_one(self, path: str) -> RetrievalOutcome:
        relative_path = normalize_path(path)
        try:
            stat_output = self._runner.run("stat", [*self.config.stat_args, path])
            if not stat_output.ok:
                return self._skip(relative_path, SKIP_STAT_FAILED, f"exit {stat_output.exit_code}")
            try:
                size = int(stat_output.text.strip())
            except ValueError:
                return self._skip(relative_path, SKIP_BAD_SIZE, stat_output.text.strip()[:80])
            if size >= self.config.size_threshold:
                return self._skip(
                    relative_path,
                    SKIP_TOO_LARGE,
                    f"{size} >= {self.config.size_threshold} bytes",
                )

            cat_output = self._runner.run("cat", [path])
            if not cat_output.ok:
                return self._skip(relative_path, SKIP_READ_FAILED, f"exit {cat_output.exit_code}")
        except CommandTransportError as exc:
            return self._skip(relative_path, SKIP_TRANSPORT, str(exc))

        return Retrieved(relative_path=relative_path, content=cat_output.text, size=size)

    def directory_structure(self) -> str:
        """Return the first directories of the project, one per line.

        Failures degrade to an empty string.
        """
        args = build_find_dirs_args(self.config.structure_excludes)
        try:
            output = self._runner.run("find", args)
        except CommandTransportError as exc:
            self.logger.warning("Directory listing failed: %s", exc)
            return ""
        if not output.ok:
            return ""
        return "\n".join(output.lines()[: self.config.structure_limit])

    def _skip(self, relative_path: str, reason: str, detail: str) -> Skipped:
        self.logger.debug("Skipping %s (%s: %s)", relative_path, reason, detail)
        return Skipped(relative_path=relative_path, reason=reason, detail=detail)


__all__ = [
    "FileDiscovery",
    "RetrievalOutcome",
    "SKIP_BAD_SIZE",
    "SKIP_READ_FAILED",
    "SKIP_STAT_FAILED",
    "SKIP_TOO_LARGE",
    "SKIP_TRANSPORT",
    "build_find_dirs_args",
    "build_find_files_args",
    "normalize_path",
]
