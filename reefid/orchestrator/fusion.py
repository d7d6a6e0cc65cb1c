"""
Periodic sample -> infer -> fuse -> publish loop.

Every tick reads the latest frame, runs the scene classifier and the object
detector on it concurrently, and publishes the top detections of both as one
ranked list. The timer does not wait for a tick to finish, so slow inference
can leave several ticks in flight at once.
"""
import asyncio
from reefid.orchestrator.contracts import MAX_DETECTIONS, Detection, DetectionKind, DetectionSet
from reefid.orchestrator.errors import InferenceError

TICK_PERIOD_S = 1.0


def fuse(scene_results, object_results, limit: int = MAX_DETECTIONS) -> DetectionSet:
    merged = [
        Detection(label=r.class_name, confidence=float(r.probability), kind=DetectionKind.SCENE)
        for r in scene_results
    ]
    merged += [
        Detection(label=r.label, confidence=float(r.score), kind=DetectionKind.OBJECT)
        for r in object_results
    ]
    # Stable sort: equal confidences keep scene-before-object order
    merged.sort(key=lambda d: d.confidence, reverse=True)
    return tuple(merged[:limit])


class DetectionFusionEngine:
    def __init__(self, registry, session, gate, status_store, sink=None,
                 tick_period: float = TICK_PERIOD_S, limit: int = MAX_DETECTIONS):
        self.registry = registry
        self.session = session
        self.gate = gate
        self.status = status_store
        self.tick_period = tick_period
        self.limit = limit
        self.detections: DetectionSet = ()
        self._sink = sink or status_store.set_detections
        self._tick_seq = 0
        self._published_seq = 0
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def start(self):
        if self.running:
            return
        self._timer = asyncio.create_task(self._run(), name="fusion-timer")
        self.status.log(f"fusion: timer started period={self.tick_period:.3f}s")

    async def stop(self):
        tasks = [t for t in (self._timer, *self._inflight) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timer = None
        self._inflight.clear()
        self.status.log("fusion: timer stopped")

    def clear(self):
        self._publish(())
        self.status.log("fusion: detections cleared")

    async def tick(self) -> bool:
        """One inference cycle. Returns True when a new detection set was published."""
        if not self.registry.is_ready():
            return False
        source = self.session.current_frame_source()
        if source is None or not self.gate.allows_inference():
            return False

        self._tick_seq += 1
        seq = self._tick_seq
        generation = self.session.generation

        frame = await asyncio.to_thread(source.read_frame)
        if frame is None:
            self.status.log(f"fusion: tick {seq} skipped, no frame")
            return False

        results = await asyncio.gather(
            self._infer(self.registry.scene.name, self.registry.scene.classify, frame),
            self._infer(self.registry.objects.name, self.registry.objects.detect, frame),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            for e in errors:
                if not isinstance(e, InferenceError):
                    raise e
                self.status.log(f"fusion: tick {seq} discarded: {e}")
            return False
        scene_results, object_results = results

        # Re-check at publish time: the stream may have been stopped or replaced
        if generation != self.session.generation or not self.gate.allows_inference():
            self.status.log(f"fusion: tick {seq} dropped, stream changed during inference")
            return False
        if seq < self._published_seq:
            self.status.log(f"fusion: tick {seq} dropped, tick {self._published_seq} already published")
            return False

        self._publish(fuse(scene_results, object_results, self.limit), seq)
        return True

    async def _infer(self, name: str, fn, frame):
        try:
            return await asyncio.to_thread(fn, frame)
        except Exception as e:
            raise InferenceError(name, e) from e

    def _publish(self, detections: DetectionSet, seq: int | None = None):
        if seq is not None:
            self._published_seq = seq
        self.detections = detections
        self._sink(detections)

    async def _run(self):
        while True:
            await asyncio.sleep(self.tick_period)
            task = asyncio.create_task(self._fire())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _fire(self):
        try:
            await self.tick()
        except Exception as e:
            self.status.log(f"fusion: tick error {type(e).__name__}: {e}")
