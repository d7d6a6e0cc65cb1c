"""Error taxonomy. Each error is caught where it originates and turned into state."""


class ReefIdError(Exception):
    pass


class ModelLoadError(ReefIdError):
    """A recognition model could not be loaded. The registry stays not-ready."""


class CapturePermissionError(ReefIdError):
    """Camera access was denied, or the device is busy or missing."""

    def __init__(self, facing_mode, reason: str = ""):
        self.facing_mode = facing_mode
        self.reason = reason
        super().__init__(f"camera unavailable for facing={getattr(facing_mode, 'value', facing_mode)}: {reason}")


class InferenceError(ReefIdError):
    """A model call failed during one tick."""

    def __init__(self, model: str, cause: BaseException):
        self.model = model
        self.cause = cause
        super().__init__(f"{model} inference failed: {type(cause).__name__}: {cause}")


# Error codes reported over HTTP
ERR_CAMERA_DENIED = "CAMERA_DENIED"
ERR_NO_STREAM = "NO_STREAM"
ERR_MODELS_NOT_READY = "MODELS_NOT_READY"
