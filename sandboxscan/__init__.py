"""Structured manifests and dependency errors from remote dev sandboxes."""

from .commands import CommandExecutor, CommandResult, CommandRunner, SubprocessExecutor
from .config import ConfigError, ScanConfig, load_config
from .errors import (
    CommandTransportError,
    DiscoveryError,
    NoActiveSessionError,
    SandboxScanError,
    SessionClosedError,
)
from .models import DependencyError, FileInfo, FileManifest, RouteInfo
from .session import SandboxSession, SessionRegistry

__version__ = "0.1.0"

__all__ = [
    "CommandExecutor",
    "CommandResult",
    "CommandRunner",
    "CommandTransportError",
    "ConfigError",
    "DependencyError",
    "DiscoveryError",
    "FileInfo",
    "FileManifest",
    "NoActiveSessionError",
    "RouteInfo",
    "SandboxScanError",
    "SandboxSession",
    "ScanConfig",
    "SessionClosedError",
    "SessionRegistry",
    "SubprocessExecutor",
    "load_config",
]
