"""Shared fakes and fixtures for the reefid test suite."""

import asyncio
import threading
import time

import pytest

from reefid.adapters.camera.mock_camera import MockCamera
from reefid.adapters.vision.base import ObjectModel, SceneModel
from reefid.orchestrator.capture_session import CaptureSession
from reefid.orchestrator.contracts import ObjectResult, SceneResult
from reefid.orchestrator.fusion import DetectionFusionEngine
from reefid.orchestrator.model_registry import ModelRegistry
from reefid.orchestrator.permission_gate import PermissionGate
from reefid.services.status_store import StatusStore


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_addoption(parser):
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that open a real webcam",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Fakes
# =============================================================================

class FakeScene(SceneModel):
    """Scene model returning fixed results, or raising when `error` is set."""

    name = "fake_scene"

    def __init__(self, results=None, error=None):
        self.results = list(results or [])
        self.error = error
        self.calls = 0

    def classify(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.results)


class FakeObjects(ObjectModel):
    name = "fake_objects"

    def __init__(self, results=None, error=None):
        self.results = list(results or [])
        self.error = error
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.results)


class BlockingScene(FakeScene):
    """Each classify() call blocks until its own release event is set.

    Calls are numbered in the order they enter, so a test can hold one tick
    in flight while another completes.
    """

    def __init__(self, results=None, max_calls: int = 8):
        super().__init__(results)
        self.releases = [threading.Event() for _ in range(max_calls)]
        self.entered = 0
        self._lock = threading.Lock()

    def classify(self, frame):
        with self._lock:
            index = self.entered
            self.entered += 1
        self.releases[index].wait(timeout=5)
        return list(self.results)

    def release_all(self):
        for event in self.releases:
            event.set()


class StrictCamera(MockCamera):
    """Mock camera that records how many streams were ever open at once."""

    def __init__(self, status_store, deny=None, delay: float = 0.0):
        super().__init__(status_store, deny=deny or set())
        self.delay = delay
        self.max_open = 0

    def open_stream(self, facing_mode, ideal_width, ideal_height):
        if self.delay:
            time.sleep(self.delay)
        stream = super().open_stream(facing_mode, ideal_width, ideal_height)
        self.max_open = max(self.max_open, len(self.open_streams))
        return stream


async def wait_until(predicate, timeout: float = 2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture
def camera(status) -> StrictCamera:
    return StrictCamera(status)


@pytest.fixture
def scene_model() -> FakeScene:
    return FakeScene([SceneResult("coral reef", 0.7), SceneResult("sea anemone", 0.2)])


@pytest.fixture
def object_model() -> FakeObjects:
    return FakeObjects([ObjectResult("person", 0.8, (1, 2, 3, 4)), ObjectResult("boat", 0.1)])


@pytest.fixture
def session(camera, status) -> CaptureSession:
    return CaptureSession(camera, status)


@pytest.fixture
def gate(session) -> PermissionGate:
    return PermissionGate(session)


@pytest.fixture
def registry(status, scene_model, object_model) -> ModelRegistry:
    return ModelRegistry(lambda: scene_model, lambda: object_model, status)


@pytest.fixture
def engine(registry, session, gate, status) -> DetectionFusionEngine:
    return DetectionFusionEngine(registry, session, gate, status, tick_period=3600)
