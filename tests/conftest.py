"""
Shared test fixtures and pytest configuration.

Every test that installs a substitute does so through the ``interposer``
fixture, whose teardown restores all backed-up targets.
"""

from __future__ import annotations

import pytest

import sample_targets
from interpose import InterposeConfig, Interposer
from interpose.primitives import AttributePrimitive


class RecordingPrimitive(AttributePrimitive):
    """AttributePrimitive that also logs the commands it receives, in order."""

    def __init__(self):
        super().__init__()
        self.call_log: list[tuple[str, str]] = []

    def install_override(self, target, substitute):
        self.call_log.append(("install", target.label))
        super().install_override(target, substitute)

    def backup_original(self, target):
        self.call_log.append(("backup", target.label))
        super().backup_original(target)

    def restore_original(self, target):
        self.call_log.append(("restore", target.label))
        super().restore_original(target)


@pytest.fixture(autouse=True)
def _clear_side_effects():
    sample_targets.CALLS.clear()
    yield
    sample_targets.CALLS.clear()


@pytest.fixture
def primitive():
    return RecordingPrimitive()


@pytest.fixture
def interposer(primitive):
    ip = Interposer(config=InterposeConfig(), primitive=primitive)
    yield ip
    ip.reset()
