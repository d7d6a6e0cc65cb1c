class SceneModel:
    name = "scene"

    def classify(self, frame):
        """Return [SceneResult] for the whole frame, best first."""
        raise NotImplementedError


class ObjectModel:
    name = "objects"

    def detect(self, frame):
        """Return [ObjectResult], one per detected box."""
        raise NotImplementedError
