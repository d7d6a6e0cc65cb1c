import asyncio
from dataclasses import replace
from reefid.orchestrator.contracts import IDEAL_HEIGHT, IDEAL_WIDTH, CaptureState, FacingMode, PermissionStatus
from reefid.orchestrator.errors import CapturePermissionError


class CaptureSession:
    """Owns at most one open camera stream.

    `generation` changes whenever the held stream changes (open or stop), so
    work started against an older stream can tell it has been superseded.
    """

    def __init__(self, device, status_store, ideal_width: int = IDEAL_WIDTH, ideal_height: int = IDEAL_HEIGHT):
        self.device = device
        self.status = status_store
        self.ideal_width = ideal_width
        self.ideal_height = ideal_height
        self.generation = 0
        self._stream = None
        self._state = CaptureState.unknown()
        self._opening = False

    @property
    def state(self) -> CaptureState:
        return self._state

    async def open(self, facing_mode: FacingMode):
        if self._stream is not None:
            raise RuntimeError("capture_session: stop() the current stream before opening another")
        if self._opening:
            raise RuntimeError("capture_session: another open() is already in flight")

        self._opening = True
        pending = asyncio.ensure_future(asyncio.to_thread(
            self.device.open_stream, facing_mode, self.ideal_width, self.ideal_height,
        ))
        try:
            stream = await asyncio.shield(pending)
        except asyncio.CancelledError:
            # The device call keeps running in its thread; release whatever it opens
            pending.add_done_callback(_stop_orphan)
            raise
        except CapturePermissionError as e:
            self._deny(facing_mode, e.reason or str(e))
            raise
        except Exception as e:
            self._deny(facing_mode, f"{type(e).__name__}: {e}")
            raise CapturePermissionError(facing_mode, str(e)) from e
        finally:
            self._opening = False

        self._stream = stream
        self.generation += 1
        self._state = CaptureState.granted(stream, facing_mode)
        self.status.log(f"capture_session: granted {facing_mode.value} (gen={self.generation})")
        return stream

    def stop(self):
        stream, self._stream = self._stream, None
        if stream is None:
            return
        self.generation += 1
        try:
            stream.stop()
        except Exception as e:
            # The handle is already dropped; the next open still runs
            self.status.log(f"capture_session: stream stop failed: {type(e).__name__}: {e}")
        if self._state.status is PermissionStatus.GRANTED:
            self._state = replace(self._state, stream=None)
        self.status.log(f"capture_session: stopped stream (gen={self.generation})")

    @property
    def holds_stream(self) -> bool:
        return self._stream is not None

    def current_frame_source(self):
        stream = self._stream
        if stream is None or not stream.active:
            return None
        return stream

    def _deny(self, facing_mode: FacingMode, reason: str):
        self._state = CaptureState.denied(facing_mode)
        self.status.log(f"capture_session: {facing_mode.value} denied: {reason}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.stop()
        return False


def _stop_orphan(fut: asyncio.Future):
    if fut.cancelled() or fut.exception() is not None:
        return
    fut.result().stop()
