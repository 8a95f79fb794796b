# landrec/capture/history.py

import asyncio
from typing import Callable, List, Optional

from loguru import logger

from landrec.capture.context import AuthContext
from landrec.errors import LandRecError, NotFoundError
from landrec.schemas.land import AnalysisRecord
from landrec.utils.coordinates import format_lat_lon


class HistoryBrowser:
    """
    The signed-in user's past analyses.

    ``records`` is any store exposing ``list_by_owner`` and ``delete_by_id``
    (``AnalysisStore`` locally, ``RemoteRecordStore`` over HTTP). Every
    refresh replaces the whole view.
    """

    def __init__(self, context: AuthContext, records):
        self.context = context
        self.source = records
        self._records: List[AnalysisRecord] = []
        self.selected: Optional[AnalysisRecord] = None
        self.last_error: Optional[LandRecError] = None

    @property
    def records(self) -> List[AnalysisRecord]:
        return list(self._records)

    def bind(self, session) -> None:
        """Refresh after every successful submission of ``session``."""
        session.on_complete(self._refresh_after_submit)

    async def _refresh_after_submit(self, record: AnalysisRecord) -> None:
        # list_by_owner may block on HTTP or the database
        await asyncio.to_thread(self.refresh)

    def refresh(self) -> bool:
        try:
            owner = self.context.require_identity()
            records = self.source.list_by_owner(owner.id)
        except LandRecError as e:
            logger.warning(f"Could not load analysis history: {e.message}")
            self.last_error = e
            return False

        self.last_error = None
        self._records = list(records)
        if self.selected is not None and self._find(self.selected.id) is None:
            self.selected = None
        return True

    def _find(self, analysis_id: str) -> Optional[AnalysisRecord]:
        for record in self._records:
            if record.id == analysis_id:
                return record
        return None

    def select(self, analysis_id: str) -> AnalysisRecord:
        record = self._find(analysis_id)
        if record is None:
            raise NotFoundError("Analysis not found")
        self.selected = record
        return record

    def clear_selection(self) -> None:
        self.selected = None

    def delete(self, analysis_id: str, confirm: Callable[[Optional[AnalysisRecord]], bool]) -> bool:
        """
        Delete one analysis after ``confirm`` agrees.

        Returns True when the record was deleted. A record the store no longer
        has for this owner is dropped from the view too; any other failure
        leaves the view as it was.
        """
        record = self._find(analysis_id)
        if not confirm(record):
            return False

        try:
            owner = self.context.require_identity()
            self.source.delete_by_id(owner.id, analysis_id)
        except NotFoundError as e:
            self.last_error = e
            self._drop(analysis_id)
            return False
        except LandRecError as e:
            logger.warning(f"Error deleting analysis: {e.message}")
            self.last_error = e
            return False

        self.last_error = None
        self._drop(analysis_id)
        return True

    def _drop(self, analysis_id: str) -> None:
        self._records = [r for r in self._records if r.id != analysis_id]
        if self.selected is not None and self.selected.id == analysis_id:
            self.selected = None

    @staticmethod
    def summary(record: AnalysisRecord) -> str:
        c = record.coordinate
        line = f"{format_lat_lon(c.latitude, c.longitude)} | {record.created_at:%Y-%m-%d} | {record.report.terrain}"
        if record.notes:
            line += f" | {record.notes}"
        return line
