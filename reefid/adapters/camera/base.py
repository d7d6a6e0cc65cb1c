from abc import ABC, abstractmethod

class Track(ABC):
    @abstractmethod
    def stop(self) -> None:
        """Halt the track and release its share of the device."""
        ...

    @property
    @abstractmethod
    def live(self) -> bool:
        ...


class Stream(ABC):
    """A live camera stream. It is also the frame source handed to the models."""

    @abstractmethod
    def get_tracks(self) -> list[Track]:
        ...

    @abstractmethod
    def read_frame(self):
        """Latest BGR frame as a numpy array, or None if nothing is available."""
        ...

    def stop(self) -> None:
        for track in self.get_tracks():
            track.stop()

    @property
    def active(self) -> bool:
        return any(track.live for track in self.get_tracks())


class CaptureDevice(ABC):
    @abstractmethod
    def open_stream(self, facing_mode, ideal_width: int, ideal_height: int) -> Stream:
        """Open a stream for the facing mode. Raises CapturePermissionError on failure."""
        ...
