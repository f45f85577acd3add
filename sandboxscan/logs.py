"""Dev server log mining: missing dependency errors and process status."""

from __future__ import annotations

import json
import re
from typing import Iterable, List, Optional, Set

from .commands import CommandRunner
from .config import LogConfig
from .errors import CommandTransportError
from .logging import get_logger
from .models import DependencyError, LogErrorsReport, LogStatusReport

ERROR_SIGNATURE = "failed to resolve import"

_QUOTED = re.compile(r'"([^"]+)"')
_PROCESS_MARKERS = ("vite", "npm run dev")


def package_name_from_specifier(specifier: str) -> Optional[str]:
    """Return the npm package an import specifier belongs to.

    Relative specifiers return ``None``. Scoped packages keep their first two
    segments (``@radix-ui/react-dialog/dist`` -> ``@radix-ui/react-dialog``);
    anything else keeps its first segment (``lodash/merge`` -> ``lodash``).
    """
    if not specifier or specifier.startswith("."):
        return None
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2]) if len(parts) >= 2 else specifier
    return parts[0]


def dependency_error_from_line(line: str) -> Optional[DependencyError]:
    """Parse one ``failed to resolve import`` log line."""
    match = _QUOTED.search(line)
    if not match:
        return None
    specifier = match.group(1)
    package = package_name_from_specifier(specifier)
    if package is None:
        return None
    return DependencyError(
        package=package,
        message=f'Failed to resolve import "{specifier}"',
    )


def dedupe_by_package(errors: Iterable[DependencyError]) -> List[DependencyError]:
    """Keep the first error seen for each package, preserving order."""
    unique: List[DependencyError] = []
    seen: Set[str] = set()
    for error in errors:
        if error.package and error.package not in seen:
            seen.add(error.package)
            unique.append(error)
    return unique


class LogMiner:
    """Collects unresolved-import errors from the error snapshot and Vite logs.

    Every individual command failure counts as "no contribution"; mining
    never fails as a whole.
    """

    def __init__(self, runner: CommandRunner, config: LogConfig | None = None) -> None:
        self._runner = runner
        self.config = config or LogConfig()
        self.logger = get_logger("logs")

    def mine(self) -> LogErrorsReport:
        self.logger.info("Checking Vite process logs...")
        errors = self._snapshot_errors()
        known = {error.package for error in errors}

        for log_file in self._log_files()[: self.config.max_error_files]:
            for line in self._matching_lines(log_file):
                error = dependency_error_from_line(line)
                if error is None or error.package in known:
                    continue
                known.add(error.package)
                errors.append(error)

        report = LogErrorsReport(errors=dedupe_by_package(errors))
        if report.has_errors:
            self.logger.info(
                "Found %d missing packages: %s",
                len(report.errors),
                ", ".join(error.package for error in report.errors),
            )
        return report

    def _snapshot_errors(self) -> List[DependencyError]:
        try:
            text = self._runner.read_text("cat", [self.config.error_snapshot])
        except CommandTransportError as exc:
            self.logger.debug("Error snapshot unavailable: %s", exc)
            return []
        if text is None:
            return []
        try:
            data = json.loads(text)
        except ValueError:
            self.logger.debug("Ignoring malformed error snapshot %s", self.config.error_snapshot)
            return []
        records = data.get("errors") if isinstance(data, dict) else None
        if not isinstance(records, list):
            return []
        seeded: List[DependencyError] = []
        for record in records:
            error = DependencyError.from_dict(record)
            if error is not None:
                seeded.append(error)
        return seeded

    def _log_files(self) -> List[str]:
        try:
            output = self._runner.run(
                "find", [self.config.directory, "-name", self.config.name_pattern, "-type", "f"]
            )
        except CommandTransportError as exc:
            self.logger.debug("Log file listing failed: %s", exc)
            return []
        return output.lines() if output.ok else []

    def _matching_lines(self, log_file: str) -> List[str]:
        try:
            output = self._runner.run("grep", ["-i", ERROR_SIGNATURE, log_file])
        except CommandTransportError as exc:
            self.logger.debug("grep failed for %s: %s", log_file, exc)
            return []
        return output.lines() if output.ok else []


class LogStatusReader:
    """Reports whether the dev server runs and tails its recent log files."""

    def __init__(self, runner: CommandRunner, config: LogConfig | None = None) -> None:
        self._runner = runner
        self.config = config or LogConfig()
        self.logger = get_logger("logs")

    def read(self) -> LogStatusReport:
        self.logger.info("Fetching Vite dev server logs...")
        report = LogStatusReport(running=False)

        ps_output = self._runner.run("ps", ["aux"])
        if ps_output.ok:
            processes = [
                line
                for line in ps_output.text.split("\n")
                if any(marker in line.lower() for marker in _PROCESS_MARKERS)
            ]
            report.running = bool(processes)
            if report.running:
                report.logs.append("Vite is running")
                report.logs.extend(processes[: self.config.max_process_lines])
            else:
                report.logs.append("Vite process not found")

        for log_file in self._log_files()[: self.config.max_status_files]:
            tail = self._tail(log_file)
            if tail is not None:
                report.logs.append(f"--- {log_file} ---")
                report.logs.append(tail)
        return report

    def _log_files(self) -> List[str]:
        args = [
            self.config.directory,
            "-name",
            self.config.name_pattern,
            "-name",
            "*.log",
            "-type",
            "f",
        ]
        try:
            output = self._runner.run("find", args)
        except CommandTransportError as exc:
            self.logger.debug("Log file listing failed: %s", exc)
            return []
        return output.lines() if output.ok else []

    def _tail(self, log_file: str) -> Optional[str]:
        try:
            return self._runner.read_text("tail", ["-n", str(self.config.tail_lines), log_file])
        except CommandTransportError as exc:
            self.logger.debug("Unable to tail %s: %s", log_file, exc)
            return None


__all__ = [
    "ERROR_SIGNATURE",
    "LogMiner",
    "LogStatusReader",
    "dedupe_by_package",
    "dependency_error_from_line",
    "package_name_from_specifier",
]
