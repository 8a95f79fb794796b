# landrec/routers/analyze.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from landrec.auth import get_current_identity
from landrec.db import get_db
from landrec.pipeline import submit_analysis
from landrec.schemas.analyze_land import AnalysisRow, AnalyzeLandRequest, AnalyzeLandResponse
from landrec.schemas.land import Identity
from landrec.store import AnalysisStore

router = APIRouter(tags=["analyze"])


@router.post("/analyze-land", response_model=AnalyzeLandResponse)
def analyze_land(
    payload: AnalyzeLandRequest,
    owner: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Classify a captured coordinate + photo and store it for the caller."""

    record = submit_analysis(AnalysisStore(db), owner, payload)

    return AnalyzeLandResponse(success=True, data=AnalysisRow.from_record(record))
