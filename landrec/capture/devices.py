# landrec/capture/devices.py
"""
Device collaborators for a capture session.

Drivers are supplied by the embedding application; the session only relies
on these protocols. Both operations are single-shot and awaitable, and the
camera is acquired as an async context so it is released on every exit.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncContextManager, Optional, Protocol

from PIL import Image

from landrec.errors import DeviceError
from landrec.schemas.land import CapturedImage, Coordinate
from landrec.utils.image_data import encode_jpeg


@dataclass(frozen=True)
class GeolocationOptions:
    high_accuracy: bool = True
    timeout: float = 10.0
    maximum_age: float = 0.0  # seconds; 0 means never reuse a cached fix


@dataclass(frozen=True)
class PositionFix:
    coordinate: Coordinate
    timestamp: datetime


class GeolocationDevice(Protocol):
    supported: bool

    async def get_current_position(self, options: GeolocationOptions) -> PositionFix:
        ...


class CameraStream(Protocol):
    async def capture(self) -> CapturedImage:
        ...


class CameraDevice(Protocol):
    def open(self) -> AsyncContextManager[CameraStream]:
        ...


# -------------------------------
# Simple drivers
# -------------------------------

class FixedGeolocation:
    """Reports a manually entered coordinate as a fresh fix."""

    supported = True

    def __init__(self, coordinate: Coordinate):
        self.coordinate = coordinate

    async def get_current_position(self, options: GeolocationOptions) -> PositionFix:
        return PositionFix(coordinate=self.coordinate, timestamp=datetime.now(timezone.utc))


class _FileStream:
    def __init__(self, path: Path, quality: int):
        self.path = path
        self.quality = quality

    async def capture(self) -> CapturedImage:
        try:
            with Image.open(self.path) as img:
                return encode_jpeg(img, quality=self.quality)
        except OSError as e:
            raise DeviceError(f"Unable to read image: {self.path.name}") from e


class FileCamera:
    """Treats an image file on disk as the camera frame."""

    def __init__(self, path, quality: int = 80):
        self.path = Path(path)
        self.quality = quality
        self.is_open = False

    def open(self):
        return self

    async def __aenter__(self) -> _FileStream:
        if not self.path.exists():
            raise DeviceError("Unable to access camera. Please grant camera permissions.")
        self.is_open = True
        return _FileStream(self.path, self.quality)

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.is_open = False
        return None
