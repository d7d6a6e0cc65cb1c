"""Tests for ModelRegistry load-once semantics."""

import threading

import pytest

from conftest import FakeObjects, FakeScene
from reefid.orchestrator.errors import ModelLoadError
from reefid.orchestrator.model_registry import ModelRegistry


class TestModelRegistryLoad:

    @pytest.mark.asyncio
    async def test_loaders_run_concurrently(self, status):
        # Each loader waits for the other: only passes if both run at once
        barrier = threading.Barrier(2, timeout=2)

        def load_scene():
            barrier.wait()
            return FakeScene()

        def load_objects():
            barrier.wait()
            return FakeObjects()

        registry = ModelRegistry(load_scene, load_objects, status)

        assert await registry.load() is True
        assert registry.is_ready()

    @pytest.mark.asyncio
    async def test_not_ready_before_load(self, registry):
        assert registry.is_ready() is False
        assert registry.describe()["scene"] is None

    @pytest.mark.asyncio
    async def test_load_once(self, status):
        calls = {"scene": 0, "objects": 0}

        def load_scene():
            calls["scene"] += 1
            return FakeScene()

        def load_objects():
            calls["objects"] += 1
            return FakeObjects()

        registry = ModelRegistry(load_scene, load_objects, status)
        await registry.load()
        scene = registry.scene
        await registry.load()

        assert calls == {"scene": 1, "objects": 1}
        assert registry.scene is scene

    @pytest.mark.asyncio
    async def test_one_failure_leaves_nothing_loaded(self, status):
        def broken():
            raise FileNotFoundError("weights missing")

        registry = ModelRegistry(lambda: FakeScene(), broken, status)

        with pytest.raises(ModelLoadError, match="weights missing"):
            await registry.load()

        assert registry.is_ready() is False
        assert registry.scene is None
        assert registry.objects is None
        assert registry.describe()["error"] is not None
        assert any("load failed" in line for line in status.logs)

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self, status):
        calls = {"n": 0}

        def broken():
            calls["n"] += 1
            raise RuntimeError("boom")

        registry = ModelRegistry(broken, lambda: FakeObjects(), status)
        with pytest.raises(ModelLoadError):
            await registry.load()
        with pytest.raises(ModelLoadError):
            await registry.load()

        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_describe_names_models(self, registry):
        await registry.load()

        info = registry.describe()

        assert info == {"ready": True, "scene": "fake_scene", "objects": "fake_objects", "error": None}
