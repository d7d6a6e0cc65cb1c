import asyncio
from reefid.orchestrator.contracts import CaptureState, FacingMode
from reefid.orchestrator.errors import CapturePermissionError


class CameraController:
    """Serializes every camera acquisition: stop the old stream, then open the new one.

    All operations take the same lock, so a second toggle queues behind the
    first and two streams are never open at once.
    """

    def __init__(self, session, status_store, facing_mode: FacingMode = FacingMode.ENVIRONMENT, sink=None):
        self.session = session
        self.status = status_store
        self.facing_mode = facing_mode
        self._sink = sink or status_store.set_capture_state
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def acquire(self) -> CaptureState:
        async with self._lock:
            if self.session.current_frame_source() is not None:
                return self.session.state
            if self.session.holds_stream:
                self.status.log("camera_controller: held stream went dead, reopening")
                self.session.stop()
            return await self._open(self.facing_mode)

    async def toggle_facing(self) -> CaptureState:
        async with self._lock:
            self.session.stop()
            self.facing_mode = self.facing_mode.flipped()
            self.status.log(f"camera_controller: switching to {self.facing_mode.value}")
            return await self._open(self.facing_mode)

    async def release(self) -> CaptureState:
        async with self._lock:
            self.session.stop()
            state = self.session.state
            self._sink(state)
            return state

    async def _open(self, facing_mode: FacingMode) -> CaptureState:
        try:
            await self.session.open(facing_mode)
        except CapturePermissionError as e:
            # No retry; the next toggle is the only way out of Denied
            self.status.log(f"camera_controller: {e}")
        state = self.session.state
        self._sink(state)
        return state
