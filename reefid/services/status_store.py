from dataclasses import dataclass, field
from typing import List
from reefid.orchestrator.contracts import CaptureState, DetectionSet

MAX_LOG_LINES = 200

@dataclass
class StatusStore:
    """Latest values for the presentation layer, plus the shared log buffer."""
    detections: DetectionSet = ()
    capture: CaptureState = field(default_factory=CaptureState.unknown)
    logs: List[str] = field(default_factory=list)

    # Sinks: plain "set latest value", no acknowledgement
    def set_detections(self, detections: DetectionSet):
        self.detections = tuple(detections)

    def set_capture_state(self, state: CaptureState):
        self.capture = state

    def log(self, msg: str):
        self.logs.append(msg)
        if len(self.logs) > MAX_LOG_LINES:
            self.logs = self.logs[-MAX_LOG_LINES:]
