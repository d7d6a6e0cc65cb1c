"""
Multi-object detector: SSDlite320 / MobileNetV3 with COCO weights (torchvision).

Mirrors the COCO-SSD defaults: at most 20 boxes, score >= 0.5.
Boxes are reported as (x, y, width, height) in frame pixels.
"""
import torch
from torchvision.models.detection import (
    SSDLite320_MobileNet_V3_Large_Weights,
    ssdlite320_mobilenet_v3_large,
)
from reefid.adapters.vision.base import ObjectModel
from reefid.adapters.vision.mobilenet_scene import bgr_to_tensor
from reefid.orchestrator.contracts import ObjectResult

MAX_BOXES = 20
MIN_SCORE = 0.5


class SSDObjects(ObjectModel):
    name = "ssdlite320_mobilenet_v3"

    def __init__(self, status_store, weights=SSDLite320_MobileNet_V3_Large_Weights.COCO_V1,
                 max_boxes: int = MAX_BOXES, min_score: float = MIN_SCORE):
        self.status = status_store
        self.max_boxes = max_boxes
        self.min_score = min_score
        self._model = ssdlite320_mobilenet_v3_large(weights=weights).eval()
        self._preprocess = weights.transforms()
        self._categories = weights.meta["categories"]
        self.status.log(f"ssd_objects: ready (min_score={min_score}, max_boxes={max_boxes})")

    def detect(self, frame) -> list[ObjectResult]:
        image = self._preprocess(bgr_to_tensor(frame))
        with torch.inference_mode():
            out = self._model([image])[0]

        results: list[ObjectResult] = []
        # torchvision returns detections sorted by score
        for box, label, score in zip(out["boxes"].tolist(), out["labels"].tolist(), out["scores"].tolist()):
            if score < self.min_score:
                continue
            x1, y1, x2, y2 = box
            results.append(ObjectResult(
                label=self._categories[label],
                score=float(score),
                bbox=(x1, y1, x2 - x1, y2 - y1),
            ))
            if len(results) >= self.max_boxes:
                break
        return results
