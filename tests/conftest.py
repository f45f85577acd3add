from __future__ import annotations

import pytest

from sandboxscan.commands import CommandRunner
from tests._fixtures.sandbox import FakeSandbox


@pytest.fixture
def sandbox() -> FakeSandbox:
    """Provide an empty scripted sandbox; tests fill in files as needed."""
    return FakeSandbox()


@pytest.fixture
def runner(sandbox: FakeSandbox) -> CommandRunner:
    return CommandRunner(sandbox)
