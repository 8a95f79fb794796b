# landrec/routers/analyses.py

import io
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from landrec.auth import get_current_identity
from landrec.db import get_db
from landrec.schemas.analyze_land import AnalysisRow
from landrec.schemas.land import Identity
from landrec.store import AnalysisStore
from landrec.utils.analysis_pdf import generate_analysis_pdf

router = APIRouter(prefix="/analyses", tags=["analyses"])


# ---------------- HISTORY ----------------

@router.get("", response_model=List[AnalysisRow])
def list_analyses(owner: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """The caller's analyses, newest first."""

    records = AnalysisStore(db).list_by_owner(owner.id)
    return [AnalysisRow.from_record(r) for r in records]


@router.get("/{analysis_id}", response_model=AnalysisRow)
def get_analysis(analysis_id: str, owner: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):

    record = AnalysisStore(db).get_by_id(owner.id, analysis_id)
    return AnalysisRow.from_record(record)


# ---------------- DELETE ----------------

@router.delete("/{analysis_id}", status_code=204)
def delete_analysis(analysis_id: str, owner: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):

    AnalysisStore(db).delete_by_id(owner.id, analysis_id)
    return Response(status_code=204)


# ---------------- REPORT PDF ----------------

@router.get("/{analysis_id}/report/pdf")
def download_analysis_pdf(analysis_id: str, owner: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):

    record = AnalysisStore(db).get_by_id(owner.id, analysis_id)

    buf = io.BytesIO()
    generate_analysis_pdf(record, buf)

    return Response(
        content=buf.getvalue(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="land_analysis_{analysis_id}.pdf"'},
    )
