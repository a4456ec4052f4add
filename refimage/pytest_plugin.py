"""pytest fixtures that hand refimage collaborators to test steps.

Enable with ``pytest_plugins = ["refimage.pytest_plugin"]`` in a conftest.
"""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from .alter.planner import TransformPlanner
from .compare.capture import ResponseCapture
from .compare.response import ResponseImageComparator
from .config import Settings
from .errors import ComparisonPending
from .runs.events import EventWriter


@pytest.hookimpl(wrapper=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function):
    try:
        return (yield)
    except ComparisonPending as exc:
        pytest.skip(f"pending: {exc}")


@pytest.fixture
def refimage_settings() -> Settings:
    return Settings.from_env()


@pytest.fixture
def refimage_events(refimage_settings: Settings, tmp_path: Path) -> EventWriter:
    path = refimage_settings.events_path or tmp_path / "refimage-events.jsonl"
    return EventWriter(path, str(uuid.uuid4()))


@pytest.fixture
def transform_planner(refimage_settings: Settings, refimage_events: EventWriter) -> TransformPlanner:
    return TransformPlanner(
        refimage_settings.tool,
        events=refimage_events,
        timeout_s=refimage_settings.tool_timeout_s,
    )


@pytest.fixture
def response_capture() -> ResponseCapture:
    return ResponseCapture()


@pytest.fixture
def response_image_comparator(
    transform_planner: TransformPlanner,
    response_capture: ResponseCapture,
    refimage_settings: Settings,
    refimage_events: EventWriter,
) -> ResponseImageComparator:
    return ResponseImageComparator(transform_planner, response_capture, refimage_settings, events=refimage_events)
