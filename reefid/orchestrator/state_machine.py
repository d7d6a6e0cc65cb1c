import asyncio
from reefid.orchestrator.camera_controller import CameraController
from reefid.orchestrator.capture_session import CaptureSession
from reefid.orchestrator.contracts import FacingMode
from reefid.orchestrator.errors import ModelLoadError
from reefid.orchestrator.fusion import TICK_PERIOD_S, DetectionFusionEngine
from reefid.orchestrator.model_registry import ModelRegistry
from reefid.orchestrator.permission_gate import PermissionGate

class Orchestrator:
    """Owns the whole recognition pipeline and pushes its state into the status store.

    Camera:   Unknown -> Granted(mode) | Denied, and toggle_facing() flips the mode.
    Models:   loaded once in the background; ticks are no-ops until both are ready.
    Fusion:   one tick per period while a stream is granted.
    """

    def __init__(self, camera, scene_loader, object_loader, status_store,
                 tick_period: float = TICK_PERIOD_S, facing_mode: FacingMode = FacingMode.ENVIRONMENT):
        self.status = status_store
        self.camera = camera
        self.registry = ModelRegistry(scene_loader, object_loader, status_store)
        self.session = CaptureSession(camera, status_store)
        self.gate = PermissionGate(self.session)
        self.engine = DetectionFusionEngine(
            self.registry, self.session, self.gate, status_store, tick_period=tick_period,
        )
        self.controller = CameraController(self.session, status_store, facing_mode=facing_mode)
        self._load_task: asyncio.Task | None = None

    async def start(self):
        self.status.log(f"orchestrator: start facing={self.controller.facing_mode.value}")
        self._load_task = asyncio.create_task(self._load_models(), name="model-load")
        self.engine.start()
        await self.controller.acquire()

    async def shutdown(self):
        self.status.log("orchestrator: shutdown")
        await self.engine.stop()
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
            await asyncio.gather(self._load_task, return_exceptions=True)
        await self.controller.release()

    async def wait_models(self) -> bool:
        if self._load_task is not None:
            await asyncio.gather(self._load_task, return_exceptions=True)
        return self.registry.is_ready()

    async def toggle_facing(self):
        return await self.controller.toggle_facing()

    def clear_detections(self):
        self.engine.clear()

    async def latest_frame(self):
        """Current frame for the preview, or None without a granted stream."""
        source = self.session.current_frame_source()
        if source is None:
            return None
        return await asyncio.to_thread(source.read_frame)

    @property
    def mirrored(self) -> bool:
        # Front camera preview is shown mirrored
        return self.session.state.facing_mode is FacingMode.USER and self.gate.view == "main"

    async def _load_models(self):
        try:
            await self.registry.load()
        except ModelLoadError as e:
            self.status.log(f"orchestrator: detection disabled: {e}")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.shutdown()
        return False
