# landrec/store.py
"""
Analysis Record Store.

Rows live in ``land_analyses`` and are always scoped by ``user_id``: a
record is visible and deletable only by its owner. Each mutation commits
before returning, so a later ``list_by_owner`` from any session sees it.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from landrec.errors import NotFoundError, PersistenceError
from landrec.models.land_analysis import LandAnalysis
from landrec.schemas.land import (
    AnalysisRecord,
    Coordinate,
    LandCharacteristicsReport,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_record(row: LandAnalysis) -> AnalysisRecord:
    return AnalysisRecord(
        id=row.id,
        owner_id=row.user_id,
        coordinate=Coordinate(
            latitude=row.latitude,
            longitude=row.longitude,
            altitude=row.altitude,
            accuracy=row.accuracy,
        ),
        image_url=row.image_url,
        report=LandCharacteristicsReport.model_validate(row.analysis_result),
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class AnalysisStore:

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def insert(
        self,
        owner_id: str,
        coordinate: Coordinate,
        image: str,
        report: LandCharacteristicsReport,
        notes: Optional[str] = None,
    ) -> AnalysisRecord:
        now = self.clock()
        row = LandAnalysis(
            id=str(uuid.uuid4()),
            user_id=owner_id,
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            altitude=coordinate.altitude,
            accuracy=coordinate.accuracy,
            image_url=image,
            analysis_result=report.model_dump(by_alias=True),
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Insert of land analysis for {owner_id} failed: {e}")
            raise PersistenceError("Could not save the analysis") from e

        logger.info(f"Stored land analysis {row.id} for {owner_id}")
        return _to_record(row)

    def list_by_owner(self, owner_id: str) -> List[AnalysisRecord]:
        try:
            rows = (
                self.db.query(LandAnalysis)
                .filter(LandAnalysis.user_id == owner_id)
                .order_by(LandAnalysis.created_at.desc(), LandAnalysis.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("Could not load analyses") from e

        return [_to_record(r) for r in rows]

    def _owned_row(self, owner_id: str, analysis_id: str) -> LandAnalysis:
        try:
            row = (
                self.db.query(LandAnalysis)
                .filter(LandAnalysis.id == analysis_id, LandAnalysis.user_id == owner_id)
                .one_or_none()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("Could not load the analysis") from e

        # Absent and foreign-owned look the same to the caller.
        if row is None:
            raise NotFoundError("Analysis not found")
        return row

    def get_by_id(self, owner_id: str, analysis_id: str) -> AnalysisRecord:
        return _to_record(self._owned_row(owner_id, analysis_id))

    def delete_by_id(self, owner_id: str, analysis_id: str) -> None:
        row = self._owned_row(owner_id, analysis_id)

        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Delete of land analysis {analysis_id} failed: {e}")
            raise PersistenceError("Could not delete the analysis") from e

        logger.info(f"Deleted land analysis {analysis_id} for {owner_id}")
