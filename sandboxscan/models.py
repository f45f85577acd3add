"""Core data models shared across sandboxscan components."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

FILE_TYPE_COMPONENT = "component"
FILE_TYPE_UTILITY = "utility"
FILE_TYPE_STYLE = "style"

NPM_MISSING = "npm-missing"
UNKNOWN_FILE = "Unknown"

# Structural keys that map onto FileInfo attributes rather than metadata.
_STRUCTURAL_FIELDS = {
    "type": "type",
    "imports": "imports",
    "exports": "exports",
    "components": "components",
    "hasJSX": "has_jsx",
    "has_jsx": "has_jsx",
}

_ERROR_FIELDS = frozenset({"type", "package", "message", "file"})


def now_ms() -> int:
    """Return the current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class FileInfo:
    """Metadata and content for a single retrieved sandbox file.

    Structural fields are only reported for files that went through the
    parser; style and data files carry content and location alone.
    """

    content: str
    path: str
    relative_path: str
    type: str = FILE_TYPE_UTILITY
    last_modified: int = 0
    imports: List[Any] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    components: List[str] = field(default_factory=list)
    has_jsx: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    parsed: bool = False

    def merge(self, structure: Mapping[str, Any]) -> None:
        """Fold structural parser output into this record."""
        self.parsed = True
        for key, value in structure.items():
            attribute = _STRUCTURAL_FIELDS.get(key)
            if attribute == "type":
                if isinstance(value, str) and value:
                    self.type = value
            elif attribute is not None:
                setattr(self, attribute, value)
            else:
                self.metadata[key] = value

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.metadata)
        data.update(
            {
                "content": self.content,
                "type": self.type,
                "path": self.path,
                "relativePath": self.relative_path,
                "lastModified": self.last_modified,
            }
        )
        if self.parsed:
            data.update(
                {
                    "imports": list(self.imports),
                    "exports": list(self.exports),
                    "components": list(self.components),
                    "hasJSX": self.has_jsx,
                }
            )
        return data


@dataclass(frozen=True)
class RouteInfo:
    """A route path and the file that declares or implements it."""

    path: str
    component: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "component": self.component}


@dataclass
class FileManifest:
    """Aggregate description of a sandbox project."""

    files: Dict[str, FileInfo] = field(default_factory=dict)
    routes: List[RouteInfo] = field(default_factory=list)
    component_tree: Dict[str, Any] = field(default_factory=dict)
    entry_point: str = ""
    style_files: List[str] = field(default_factory=list)
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": {path: info.to_dict() for path, info in self.files.items()},
            "routes": [route.to_dict() for route in self.routes],
            "componentTree": self.component_tree,
            "entryPoint": self.entry_point,
            "styleFiles": list(self.style_files),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class DependencyError:
    """An unresolved bare import attributed to an npm package.

    Records seeded from an error snapshot keep any fields beyond the four
    known ones in ``extra``; they are written back out unchanged.
    """

    package: str
    message: str
    type: str = NPM_MISSING
    file: str = UNKNOWN_FILE
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, payload: object) -> Optional["DependencyError"]:
        if not isinstance(payload, dict):
            return None
        package = payload.get("package")
        if not isinstance(package, str) or not package:
            return None
        message = payload.get("message")
        error_type = payload.get("type")
        file = payload.get("file")
        return cls(
            package=package,
            message=message if isinstance(message, str) else "",
            type=error_type if isinstance(error_type, str) else NPM_MISSING,
            file=file if isinstance(file, str) else UNKNOWN_FILE,
            extra={key: value for key, value in payload.items() if key not in _ERROR_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update(
            {
                "type": self.type,
                "package": self.package,
                "message": self.message,
                "file": self.file,
            }
        )
        return data


@dataclass(frozen=True)
class Retrieved:
    """A discovered file whose content was fetched."""

    relative_path: str
    content: str
    size: int


@dataclass(frozen=True)
class Skipped:
    """A discovered file left out of the manifest, with the reason why."""

    relative_path: str
    reason: str
    detail: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.relative_path, "reason": self.reason, "detail": self.detail}


@dataclass
class ManifestResult:
    """Everything a manifest build returns to its caller."""

    manifest: FileManifest
    files: Dict[str, str]
    structure: str
    skipped: List[Skipped] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": dict(self.files),
            "structure": self.structure,
            "fileCount": self.file_count,
            "manifest": self.manifest.to_dict(),
        }


@dataclass
class LogErrorsReport:
    """Deduplicated dependency errors mined from dev server logs."""

    errors: List[DependencyError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasErrors": self.has_errors,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class LogStatusReport:
    """Dev server process status and recent log tails."""

    running: bool
    logs: List[str] = field(default_factory=list)
    has_errors: bool = False

    @property
    def status(self) -> str:
        return "running" if self.running else "stopped"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasErrors": self.has_errors,
            "logs": list(self.logs),
            "status": self.status,
        }
