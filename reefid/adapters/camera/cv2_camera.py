"""
OpenCV webcam capture adapter.
CAMERA_ENVIRONMENT_INDEX (default 0) and CAMERA_USER_INDEX (default 1) map
each facing mode to a webcam device.
"""
import os
import threading
import cv2
from reefid.adapters.camera.base import CaptureDevice, Stream, Track
from reefid.orchestrator.contracts import FacingMode
from reefid.orchestrator.errors import CapturePermissionError


class CV2Track(Track):
    def __init__(self, cap: cv2.VideoCapture):
        self._cap = cap
        self._lock = threading.Lock()

    def read(self):
        with self._lock:
            if self._cap is None or not self._cap.isOpened():
                return None
            ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame

    def stop(self) -> None:
        with self._lock:
            if self._cap is not None and self._cap.isOpened():
                self._cap.release()
            self._cap = None

    @property
    def live(self) -> bool:
        return self._cap is not None and self._cap.isOpened()


class CV2Stream(Stream):
    def __init__(self, track: CV2Track, facing_mode: FacingMode, index: int):
        self._track = track
        self.facing_mode = facing_mode
        self.index = index

    def get_tracks(self) -> list[Track]:
        return [self._track]

    def read_frame(self):
        return self._track.read()


class CV2Camera(CaptureDevice):
    def __init__(self, status_store, indices: dict | None = None):
        self.status = status_store
        self._indices = indices or {
            FacingMode.ENVIRONMENT: int(os.getenv("CAMERA_ENVIRONMENT_INDEX", "0")),
            FacingMode.USER: int(os.getenv("CAMERA_USER_INDEX", "1")),
        }

    def open_stream(self, facing_mode, ideal_width: int, ideal_height: int) -> Stream:
        index = self._indices.get(facing_mode)
        if index is None:
            raise CapturePermissionError(facing_mode, "no device configured")

        cap = cv2.VideoCapture(index)
        if not cap.isOpened():
            cap.release()
            self.status.log(f"cv2_camera: failed to open device {index} ({facing_mode.value})")
            raise CapturePermissionError(facing_mode, f"device {index} unavailable")

        # Resolution is a hint; the driver picks the closest mode it supports
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, ideal_width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, ideal_height)
        w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.status.log(f"cv2_camera: opened device {index} ({facing_mode.value}) {w}x{h}")
        return CV2Stream(CV2Track(cap), facing_mode, index)
