from pydantic import BaseModel
from typing import Literal, Optional

ViewName = Literal["loading", "denied", "main"]

class DetectionOut(BaseModel):
    label: str
    confidence: float
    kind: Literal["scene", "object"]
    percent: str               # "87.5%", as shown in the list

class StatusResponse(BaseModel):
    view: ViewName
    permission: Literal["unknown", "granted", "denied"]
    facing_mode: Optional[Literal["user", "environment"]] = None
    mirrored: bool = False
    models_ready: bool = False
    toggling: bool = False     # a camera switch is in progress
    detections: list[DetectionOut]
    logs: list[str]

class DetectionsResponse(BaseModel):
    detections: list[DetectionOut]

class ToggleFacingResponse(BaseModel):
    ok: bool
    view: ViewName
    facing_mode: Optional[Literal["user", "environment"]] = None
    error_code: Optional[str] = None

class ClearDetectionsResponse(BaseModel):
    ok: bool
    detections: list[DetectionOut]
