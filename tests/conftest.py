"""Shared pytest fixtures and helpers for gherkin-glue tests."""

from __future__ import annotations

import dataclasses as dc

import pytest

from gherkin_glue import StepRegistry


@dc.dataclass(frozen=True)
class Attachment:
    """One call recorded by :class:`RecordingUserInterface`."""

    data: str | bytes
    media_type: str
    filename: str | None


class RecordingUserInterface:
    """User interface that keeps every attachment in memory.

    Tests use it in place of the logging user interface so that ``log``
    and ``attach`` calls made by steps can be asserted on.
    """

    def __init__(self) -> None:
        """Start with no attachments."""
        self.attachments: list[Attachment] = []

    def attach(self, data: str | bytes, media_type: str, filename: str | None) -> None:
        """Record the attachment."""
        self.attachments.append(Attachment(data, media_type, filename))


@pytest.fixture
def user_interface() -> RecordingUserInterface:
    """Return a fresh recording user interface."""
    return RecordingUserInterface()


@pytest.fixture
def registry(user_interface: RecordingUserInterface) -> StepRegistry:
    """Return a registry with an active scenario."""
    step_registry = StepRegistry(user_interface=user_interface)
    step_registry.begin_scenario()
    return step_registry
