"""Tests for sandbox session lifecycle."""

from __future__ import annotations

import pytest

from sandboxscan.errors import NoActiveSessionError, SessionClosedError
from sandboxscan.session import SandboxSession, SessionRegistry
from tests._fixtures.sandbox import FakeSandbox


def test_session_caches_last_manifest() -> None:
    sandbox = FakeSandbox({"src/main.jsx": "", "src/App.jsx": ""})
    session = SandboxSession(sandbox)

    first = session.build_manifest()
    assert session.manifest is first.manifest

    sandbox.files.pop("src/App.jsx")
    second = session.build_manifest()
    assert session.manifest is second.manifest
    assert list(session.manifest.files) == ["/src/main.jsx"]


def test_closed_session_refuses_commands() -> None:
    sandbox = FakeSandbox({"a.js": ""})
    with SandboxSession(sandbox, name="demo") as session:
        session.build_manifest()
        assert session.manifest is not None

    assert session.closed is True
    assert session.manifest is None
    with pytest.raises(SessionClosedError, match="demo"):
        session.mine_dependency_errors()
    calls_before = len(sandbox.calls)
    with pytest.raises(SessionClosedError):
        session.build_manifest()
    assert len(sandbox.calls) == calls_before


def test_registry_requires_active_session() -> None:
    registry = SessionRegistry()
    with pytest.raises(NoActiveSessionError, match="No active sandbox"):
        registry.require()


def test_registry_activate_replaces_and_closes_previous() -> None:
    registry = SessionRegistry()
    first = SandboxSession(FakeSandbox())
    second = SandboxSession(FakeSandbox())

    registry.activate(first)
    registry.activate(second)

    assert registry.require() is second
    assert first.closed is True
    assert second.closed is False

    registry.clear()
    assert registry.current() is None
    assert second.closed is True
