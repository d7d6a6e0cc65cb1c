import os
from contextlib import asynccontextmanager
import cv2
from fastapi import FastAPI, Response
from dotenv import load_dotenv
from reefid.orchestrator.contracts import FacingMode, PermissionStatus
from reefid.orchestrator import errors
from reefid.orchestrator.state_machine import Orchestrator
from reefid.services.models import (
    DetectionOut, StatusResponse, DetectionsResponse,
    ToggleFacingResponse, ClearDetectionsResponse,
)
from reefid.services.status_store import StatusStore

load_dotenv(dotenv_path="reefid/.env", override=False)


def build_camera(status: StatusStore):
    # Camera adapter: CAMERA_ADAPTER=cv2 | mock  (default: cv2)
    adapter = os.getenv("CAMERA_ADAPTER", "cv2").lower()
    if adapter == "mock":
        from reefid.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(status)
    else:
        from reefid.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status)
    status.log(f"camera adapter: {type(camera).__name__}")
    return camera


def build_model_loaders(status: StatusStore):
    # Vision adapter: VISION_ADAPTER=torchvision | mock  (default: torchvision)
    adapter = os.getenv("VISION_ADAPTER", "torchvision").lower()
    if adapter == "mock":
        from reefid.adapters.vision.mock_vision import MockObjects, MockScene
        status.log("vision adapter: mock")
        return (lambda: MockScene(status)), (lambda: MockObjects(status))

    def load_scene():
        from reefid.adapters.vision.mobilenet_scene import MobileNetScene
        return MobileNetScene(status)

    def load_objects():
        from reefid.adapters.vision.ssd_objects import SSDObjects
        return SSDObjects(status)

    status.log("vision adapter: torchvision")
    return load_scene, load_objects


def build_orchestrator(status: StatusStore | None = None) -> Orchestrator:
    status = status or StatusStore()
    tick_ms = int(os.getenv("TICK_MS", "1000"))
    facing = FacingMode(os.getenv("INITIAL_FACING", FacingMode.ENVIRONMENT.value).lower())
    scene_loader, object_loader = build_model_loaders(status)
    return Orchestrator(
        camera=build_camera(status),
        scene_loader=scene_loader,
        object_loader=object_loader,
        status_store=status,
        tick_period=tick_ms / 1000.0,
        facing_mode=facing,
    )


def _detection_out(d) -> DetectionOut:
    return DetectionOut(label=d.label, confidence=d.confidence, kind=d.kind.value, percent=f"{d.confidence * 100:.1f}%")


def create_app(orch: Orchestrator | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.orch = orch or build_orchestrator()
        async with app.state.orch:
            yield

    app = FastAPI(title="reefid", lifespan=lifespan)

    def _orch() -> Orchestrator:
        return app.state.orch

    @app.get("/status", response_model=StatusResponse)
    def get_status():
        o = _orch()
        capture = o.status.capture
        return StatusResponse(
            view=o.gate.view,
            permission=capture.status.value,
            facing_mode=capture.facing_mode.value if capture.facing_mode else None,
            mirrored=o.mirrored,
            models_ready=o.registry.is_ready(),
            toggling=o.controller.busy,
            detections=[_detection_out(d) for d in o.status.detections],
            logs=o.status.logs,
        )

    @app.get("/detections", response_model=DetectionsResponse)
    def get_detections():
        return DetectionsResponse(detections=[_detection_out(d) for d in _orch().status.detections])

    @app.post("/toggle_facing", response_model=ToggleFacingResponse)
    async def toggle_facing():
        o = _orch()
        state = await o.toggle_facing()
        ok = state.status is PermissionStatus.GRANTED
        return ToggleFacingResponse(
            ok=ok,
            view=o.gate.view,
            facing_mode=state.facing_mode.value if state.facing_mode else None,
            error_code=None if ok else errors.ERR_CAMERA_DENIED,
        )

    @app.post("/clear_detections", response_model=ClearDetectionsResponse)
    def clear_detections():
        o = _orch()
        o.clear_detections()
        return ClearDetectionsResponse(ok=True, detections=[_detection_out(d) for d in o.status.detections])

    @app.get("/frame.jpg")
    async def frame_jpg():
        """Latest camera frame as JPEG. The front camera is mirrored like the live preview."""
        o = _orch()
        frame = await o.latest_frame()
        if frame is None:
            return Response(status_code=404, content=errors.ERR_NO_STREAM)
        if o.mirrored:
            frame = cv2.flip(frame, 1)
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, 85])
        if not ok:
            o.status.log("frame.jpg: encode failed")
            return Response(status_code=500, content="encode failed")
        return Response(content=bytes(buf), media_type="image/jpeg", headers={"Cache-Control": "no-store"})

    @app.get("/health")
    def health():
        """Adapters in use and readiness of each subsystem."""
        o = _orch()
        checks = {"api": True}
        checks["camera_adapter"] = type(o.camera).__name__
        checks["models"] = o.registry.describe()
        checks["permission"] = o.gate.status.value
        checks["stream_open"] = o.session.current_frame_source() is not None
        checks["fusion_running"] = o.engine.running
        checks["all_ok"] = checks["models"]["ready"] and checks["stream_open"]
        if not checks["models"]["ready"]:
            checks["error_code"] = errors.ERR_MODELS_NOT_READY
        return checks

    return app


app = create_app()
