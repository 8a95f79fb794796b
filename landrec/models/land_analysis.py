from sqlalchemy import Column, DateTime, Float, Index, JSON, String, Text
from landrec.db_base import Base


class LandAnalysis(Base):
    __tablename__ = "land_analyses"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    altitude = Column(Float)
    accuracy = Column(Float)
    image_url = Column(Text, nullable=False)
    analysis_result = Column(JSON, nullable=False)  # terrain, vegetation, soilType, ...
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_land_analyses_user_created", "user_id", "created_at"),
    )
