from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class FacingMode(str, Enum):
    USER = "user"                # front camera
    ENVIRONMENT = "environment"  # rear camera

    def flipped(self) -> "FacingMode":
        return FacingMode.USER if self is FacingMode.ENVIRONMENT else FacingMode.ENVIRONMENT


class DetectionKind(str, Enum):
    SCENE = "scene"
    OBJECT = "object"


class PermissionStatus(str, Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class SceneResult:
    class_name: str
    probability: float


@dataclass(frozen=True)
class ObjectResult:
    label: str
    score: float
    bbox: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)   # x, y, width, height


@dataclass(frozen=True)
class Detection:
    label: str
    confidence: float          # 0..1, as reported by the model
    kind: DetectionKind


# Ranked, at most MAX_DETECTIONS entries, replaced wholesale on every publish
DetectionSet = Tuple[Detection, ...]

MAX_DETECTIONS = 5
IDEAL_WIDTH = 1080
IDEAL_HEIGHT = 1920


@dataclass(frozen=True)
class CaptureState:
    status: PermissionStatus = PermissionStatus.UNKNOWN
    stream: Optional[Any] = None
    facing_mode: Optional[FacingMode] = None

    @classmethod
    def unknown(cls) -> "CaptureState":
        return cls()

    @classmethod
    def denied(cls, facing_mode: Optional[FacingMode] = None) -> "CaptureState":
        return cls(status=PermissionStatus.DENIED, facing_mode=facing_mode)

    @classmethod
    def granted(cls, stream, facing_mode: FacingMode) -> "CaptureState":
        return cls(status=PermissionStatus.GRANTED, stream=stream, facing_mode=facing_mode)
