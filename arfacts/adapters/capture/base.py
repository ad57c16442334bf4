from abc import ABC, abstractmethod


class CaptureAdapter(ABC):
    @abstractmethod
    async def capture_screen(self) -> bytes:
        """Capture one frame. Returns JPEG bytes or raises CaptureFailure."""
        ...
