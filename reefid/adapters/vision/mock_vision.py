import random
from reefid.adapters.vision.base import ObjectModel, SceneModel
from reefid.orchestrator.contracts import ObjectResult, SceneResult

SCENE_LABELS = ["coral reef", "scuba diver", "sea anemone", "brain coral", "lionfish"]
OBJECT_LABELS = ["person", "boat", "bottle", "cup"]


class MockScene(SceneModel):
    name = "mock_scene"

    def __init__(self, status_store):
        self.status = status_store

    def classify(self, frame) -> list[SceneResult]:
        # Mock: ignore frame content, return three random classes
        labels = random.sample(SCENE_LABELS, 3)
        probs = sorted((random.uniform(0.05, 0.95) for _ in labels), reverse=True)
        return [SceneResult(class_name=l, probability=p) for l, p in zip(labels, probs)]


class MockObjects(ObjectModel):
    name = "mock_objects"

    def __init__(self, status_store):
        self.status = status_store

    def detect(self, frame) -> list[ObjectResult]:
        h, w = frame.shape[:2]
        count = random.randint(0, 3)
        return [
            ObjectResult(
                label=random.choice(OBJECT_LABELS),
                score=random.uniform(0.5, 0.99),
                bbox=(w * 0.25, h * 0.25, w * 0.5, h * 0.5),
            )
            for _ in range(count)
        ]
