from reefid.orchestrator.contracts import PermissionStatus

_VIEWS = {
    PermissionStatus.UNKNOWN: "loading",
    PermissionStatus.DENIED: "denied",
    PermissionStatus.GRANTED: "main",
}


class PermissionGate:
    """Read-only view of the capture session's last acquisition outcome."""

    def __init__(self, session):
        self._session = session

    @property
    def status(self) -> PermissionStatus:
        return self._session.state.status

    @property
    def view(self) -> str:
        return _VIEWS[self.status]

    def allows_inference(self) -> bool:
        return self.status is PermissionStatus.GRANTED and self._session.current_frame_source() is not None
