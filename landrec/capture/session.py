# landrec/capture/session.py
"""
Capture Session: one coordinate fix and one photo, submitted together.

States move IDLE -> LOCATION_PENDING -> LOCATION_READY -> IMAGE_READY ->
SUBMITTING -> COMPLETE, with FAILED reported on a failed submission before
the session settles back to IMAGE_READY for a retry. Device and store
failures are kept in ``last_error``; only a rejected precondition
(``ValidationError``) or a duplicate in-flight action
(``ActionInProgressError``) is raised to the caller.
"""

import asyncio
import inspect
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from landrec.capture.context import AuthContext
from landrec.capture.devices import GeolocationOptions
from landrec.config import get_settings
from landrec.errors import (
    ActionInProgressError,
    DeviceError,
    LandRecError,
    PersistenceError,
    ValidationError,
)
from landrec.pipeline import submit_analysis
from landrec.schemas.analyze_land import AnalyzeLandRequest
from landrec.schemas.land import AnalysisRecord, CapturedImage, Coordinate
from landrec.store import AnalysisStore
from landrec.utils.image_data import to_data_url


class CaptureState(str, Enum):
    IDLE = "idle"
    LOCATION_PENDING = "location_pending"
    LOCATION_READY = "location_ready"
    IMAGE_READY = "image_ready"
    SUBMITTING = "submitting"
    COMPLETE = "complete"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------------
# Submitters
# -------------------------------

class LocalSubmitter:
    """Runs the classify-then-insert pipeline against a database session."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _submit(self, identity, request: AnalyzeLandRequest) -> AnalysisRecord:
        db = self.session_factory()
        try:
            return submit_analysis(AnalysisStore(db), identity, request)
        finally:
            db.close()

    async def submit(self, context: AuthContext, coordinate: Coordinate,
                     image: CapturedImage, notes: Optional[str]) -> AnalysisRecord:
        identity = context.require_identity()
        request = AnalyzeLandRequest(
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            altitude=coordinate.altitude,
            accuracy=coordinate.accuracy,
            image_data=to_data_url(image),
            notes=notes,
        )
        return await asyncio.to_thread(self._submit, identity, request)


class RemoteSubmitter:
    """Posts the capture to ``/analyze-land`` with the context's token."""

    def __init__(self, client):
        self.client = client

    async def submit(self, context: AuthContext, coordinate: Coordinate,
                     image: CapturedImage, notes: Optional[str]) -> AnalysisRecord:
        token = context.require_token()
        return await asyncio.to_thread(
            self.client.analyze_land, token, coordinate, to_data_url(image), notes
        )


# -------------------------------
# Session
# -------------------------------

class CaptureSession:

    def __init__(self, context: AuthContext, geolocation, camera, submitter,
                 options: Optional[GeolocationOptions] = None,
                 camera_timeout: Optional[float] = None,
                 clock: Callable[[], datetime] = _utcnow):
        settings = get_settings()
        self.context = context
        self.geolocation = geolocation
        self.camera = camera
        self.submitter = submitter
        self.options = options or GeolocationOptions(timeout=settings.geolocation_timeout_s)
        self.camera_timeout = camera_timeout if camera_timeout is not None else settings.camera_timeout_s
        self.clock = clock

        self.state = CaptureState.IDLE
        self.coordinate: Optional[Coordinate] = None
        self.image: Optional[CapturedImage] = None
        self.notes: Optional[str] = None
        self.last_error: Optional[LandRecError] = None
        self.last_record: Optional[AnalysisRecord] = None

        self._tasks: Dict[str, asyncio.Task] = {}
        self._state_listeners: List[Callable[[CaptureState], None]] = []
        self._complete_listeners: List[Callable[[AnalysisRecord], Any]] = []
        self._closed = False

        context.register(self)

    # ---------- observers ----------

    def on_state_change(self, callback: Callable[[CaptureState], None]) -> None:
        self._state_listeners.append(callback)

    def on_complete(self, callback: Callable[[AnalysisRecord], Any]) -> None:
        """``callback`` may be a coroutine function; it is awaited before ``submit`` returns."""
        self._complete_listeners.append(callback)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def can_submit(self) -> bool:
        return self.coordinate is not None and self.image is not None and "submit" not in self._tasks

    def _set_state(self, state: CaptureState) -> None:
        if state == self.state:
            return
        logger.debug(f"Capture session: {self.state.value} -> {state.value}")
        self.state = state
        for callback in list(self._state_listeners):
            callback(state)

    def _settle(self) -> None:
        if self.coordinate is not None and self.image is not None:
            self._set_state(CaptureState.IMAGE_READY)
        elif self.coordinate is not None:
            self._set_state(CaptureState.LOCATION_READY)
        else:
            self._set_state(CaptureState.IDLE)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValidationError("Capture session is closed")

    def _ensure_idle(self, action: str) -> None:
        if action in self._tasks:
            raise ActionInProgressError(f"{action.capitalize()} already in progress")

    async def _run(self, action: str, factory):
        task = asyncio.ensure_future(factory())
        self._tasks[action] = task
        try:
            return await task
        finally:
            self._tasks.pop(action, None)

    # ---------- location ----------

    async def start(self) -> Optional[Coordinate]:
        return await self.refresh_location()

    async def refresh_location(self) -> Optional[Coordinate]:
        """Ask the geolocation device for one fresh fix."""
        self._ensure_open()
        self._ensure_idle("location")
        self._ensure_idle("submit")

        if self.geolocation is None or not getattr(self.geolocation, "supported", True):
            return self._location_failed(DeviceError("Geolocation is not supported by this device"))

        self.last_error = None
        self._set_state(CaptureState.LOCATION_PENDING)
        requested_at = self.clock()

        try:
            fix = await self._run("location", lambda: asyncio.wait_for(
                self.geolocation.get_current_position(self.options),
                timeout=self.options.timeout,
            ))
        except asyncio.TimeoutError:
            return self._location_failed(DeviceError("Unable to retrieve location: timed out"))
        except DeviceError as e:
            return self._location_failed(e)
        except asyncio.CancelledError:
            if self._closed:
                return None
            raise
        except Exception as e:
            logger.exception("Geolocation device failed")
            return self._location_failed(DeviceError(f"Unable to retrieve location: {e}"))

        age = (requested_at - fix.timestamp).total_seconds()
        if age > self.options.maximum_age:
            return self._location_failed(
                DeviceError(f"Unable to retrieve location: cached fix is {age:.1f}s old")
            )

        self.coordinate = fix.coordinate
        logger.info(f"Location fix {fix.coordinate.latitude:.4f}, {fix.coordinate.longitude:.4f}")
        self._settle()
        return self.coordinate

    def _location_failed(self, error: DeviceError) -> None:
        logger.warning(error.message)
        self.last_error = error
        self.coordinate = None
        self._set_state(CaptureState.IDLE)
        return None

    # ---------- camera ----------

    async def _capture_once(self) -> CapturedImage:
        try:
            async with self.camera.open() as stream:
                return await asyncio.wait_for(stream.capture(), timeout=self.camera_timeout)
        except asyncio.TimeoutError as e:
            raise DeviceError("Camera capture timed out") from e
        except OSError as e:
            raise DeviceError("Unable to access camera. Please grant camera permissions.") from e

    async def capture_image(self) -> Optional[CapturedImage]:
        """Take one still; the camera is released before this returns."""
        self._ensure_open()
        self._ensure_idle("camera")
        self._ensure_idle("submit")

        self.last_error = None
        try:
            image = await self._run("camera", self._capture_once)
        except DeviceError as e:
            logger.warning(e.message)
            self.last_error = e
            return None
        except asyncio.CancelledError:
            if self._closed:
                return None
            raise

        self.image = image
        self._settle()
        return image

    def retake(self) -> None:
        self._ensure_open()
        self._ensure_idle("submit")
        self.image = None
        self._settle()

    # ---------- submission ----------

    async def submit(self) -> Optional[AnalysisRecord]:
        """
        Classify and persist the held capture.

        Returns the new record, or ``None`` when the submission failed (see
        ``last_error``); the coordinate and image are kept for a retry.
        """
        self._ensure_open()
        self._ensure_idle("submit")
        if self.coordinate is None or self.image is None:
            raise ValidationError("Please ensure GPS location is available and image is captured")

        coordinate, image, notes = self.coordinate, self.image, self.notes or None

        self.last_error = None
        self._set_state(CaptureState.SUBMITTING)

        try:
            record = await self._run(
                "submit", lambda: self.submitter.submit(self.context, coordinate, image, notes)
            )
        except asyncio.CancelledError:
            if self._closed:
                return None
            self._settle()
            raise
        except LandRecError as e:
            return self._submit_failed(e)
        except Exception as e:
            logger.exception("Submission failed")
            return self._submit_failed(PersistenceError(f"Error analyzing land: {e}"))

        self.last_record = record
        self.image = None
        self.notes = None
        self._set_state(CaptureState.COMPLETE)
        logger.info(f"Submitted analysis {record.id} ({record.report.terrain})")

        for callback in list(self._complete_listeners):
            result = callback(record)
            if inspect.isawaitable(result):
                await result
        return record

    def _submit_failed(self, error: LandRecError) -> None:
        logger.warning(f"Submission failed: {error.message}")
        self.last_error = error
        self._set_state(CaptureState.FAILED)
        self._settle()
        return None

    # ---------- teardown ----------

    def close(self) -> None:
        """Cancel device work in flight and drop the held capture."""
        if self._closed:
            return
        self._closed = True
        for task in list(self._tasks.values()):
            task.cancel()
        self.coordinate = None
        self.image = None
        self.notes = None
        self._set_state(CaptureState.IDLE)
        self.context.unregister(self)
