import asyncio
import time
from reefid.orchestrator.errors import ModelLoadError

class ModelRegistry:
    """Holds the scene classifier and object detector for the process lifetime.

    Both loaders run concurrently in worker threads. The handles are assigned
    together once both succeed, so a half-loaded registry is never visible.
    A failed load is final: the registry stays not-ready and is not retried.
    """

    def __init__(self, scene_loader, object_loader, status_store):
        self._scene_loader = scene_loader
        self._object_loader = object_loader
        self.status = status_store
        self.scene = None
        self.objects = None
        self.error: ModelLoadError | None = None
        self._lock = asyncio.Lock()

    def is_ready(self) -> bool:
        return self.scene is not None and self.objects is not None

    async def load(self) -> bool:
        async with self._lock:
            if self.is_ready():
                return True
            if self.error is not None:
                raise self.error

            self.status.log("model_registry: loading scene + object models")
            t0 = time.time()
            results = await asyncio.gather(
                asyncio.to_thread(self._scene_loader),
                asyncio.to_thread(self._object_loader),
                return_exceptions=True,
            )
            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                detail = "; ".join(f"{type(e).__name__}: {e}" for e in failures)
                self.error = ModelLoadError(detail)
                self.status.log(f"model_registry: load failed, detection disabled ({detail})")
                raise self.error from failures[0]

            self.scene, self.objects = results
            dt = int((time.time() - t0) * 1000)
            self.status.log(f"model_registry: ready scene={self._name(self.scene)} objects={self._name(self.objects)} dt={dt}ms")
            return True

    def describe(self) -> dict:
        return {
            "ready": self.is_ready(),
            "scene": self._name(self.scene),
            "objects": self._name(self.objects),
            "error": str(self.error) if self.error else None,
        }

    @staticmethod
    def _name(model) -> str | None:
        if model is None:
            return None
        return getattr(model, "name", type(model).__name__)
