from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude: Optional[float] = Field(None, description="Meters above sea level")
    accuracy: Optional[float] = Field(None, ge=0, description="Horizontal accuracy in meters")


class CapturedImage(BaseModel):
    """One still photograph as produced by the camera."""
    model_config = ConfigDict(frozen=True)

    data: bytes
    encoding: str = "image/jpeg"
    width: Optional[int] = None
    height: Optional[int] = None


class LandCharacteristicsReport(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    terrain: str
    vegetation: str
    soil_type: str = Field(..., alias="soilType")
    land_use: str = Field(..., alias="landUse")
    features: List[str] = Field(..., min_length=1)
    recommendations: List[str] = Field(..., min_length=1)


class Identity(BaseModel):
    """A signed-in user as returned by the identity provider."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    email_or_handle: Optional[str] = None


class AnalysisRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str
    coordinate: Coordinate
    image_url: str
    report: LandCharacteristicsReport
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
