from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from landrec.schemas.land import AnalysisRecord, Coordinate, LandCharacteristicsReport


class AnalyzeLandRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude: Optional[float] = None
    accuracy: Optional[float] = Field(None, ge=0)
    image_data: str = Field(..., alias="imageData", min_length=1)
    notes: Optional[str] = None

    def coordinate(self) -> Coordinate:
        return Coordinate(
            latitude=self.latitude,
            longitude=self.longitude,
            altitude=self.altitude,
            accuracy=self.accuracy,
        )


class AnalysisRow(BaseModel):
    """An analysis as stored in ``land_analyses`` and returned over HTTP."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    image_url: str
    analysis_result: LandCharacteristicsReport
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "AnalysisRow":
        c = record.coordinate
        return cls(
            id=record.id,
            user_id=record.owner_id,
            latitude=c.latitude,
            longitude=c.longitude,
            altitude=c.altitude,
            accuracy=c.accuracy,
            image_url=record.image_url,
            analysis_result=record.report,
            notes=record.notes,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def to_record(self) -> AnalysisRecord:
        return AnalysisRecord(
            id=self.id,
            owner_id=self.user_id,
            coordinate=Coordinate(
                latitude=self.latitude,
                longitude=self.longitude,
                altitude=self.altitude,
                accuracy=self.accuracy,
            ),
            image_url=self.image_url,
            report=self.analysis_result,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class AnalyzeLandResponse(BaseModel):
    success: bool = True
    data: AnalysisRow


class ErrorResponse(BaseModel):
    error: str
