"""
Whole-frame scene classifier: MobileNetV2 with ImageNet weights (torchvision).

Weights are downloaded to the torch hub cache on first load. classify()
returns the top 3 classes, as the browser MobileNet classify() does.
"""
import numpy as np
import torch
from torchvision.models import MobileNet_V2_Weights, mobilenet_v2
from reefid.adapters.vision.base import SceneModel
from reefid.orchestrator.contracts import SceneResult

TOP_K = 3


def bgr_to_tensor(frame) -> torch.Tensor:
    """HxWx3 uint8 BGR frame -> 3xHxW uint8 RGB tensor."""
    rgb = np.ascontiguousarray(frame[:, :, ::-1])
    return torch.from_numpy(rgb).permute(2, 0, 1)


class MobileNetScene(SceneModel):
    name = "mobilenet_v2"

    def __init__(self, status_store, weights=MobileNet_V2_Weights.IMAGENET1K_V2):
        self.status = status_store
        self._model = mobilenet_v2(weights=weights).eval()
        self._preprocess = weights.transforms()
        self._categories = weights.meta["categories"]
        self.status.log(f"mobilenet_scene: ready ({len(self._categories)} classes)")

    def classify(self, frame) -> list[SceneResult]:
        batch = self._preprocess(bgr_to_tensor(frame)).unsqueeze(0)
        with torch.inference_mode():
            probs = self._model(batch).softmax(dim=1)[0]
        top = torch.topk(probs, TOP_K)
        return [
            SceneResult(class_name=self._categories[idx], probability=float(p))
            for p, idx in zip(top.values.tolist(), top.indices.tolist())
        ]
