# landrec/pipeline.py

from loguru import logger

from landrec.errors import LandRecError
from landrec.schemas.analyze_land import AnalyzeLandRequest
from landrec.schemas.land import AnalysisRecord, Identity
from landrec.store import AnalysisStore
from landrec.utils.land_classifier import classify


def submit_analysis(store: AnalysisStore, owner: Identity, request: AnalyzeLandRequest) -> AnalysisRecord:
    """
    Classify the capture, then persist it as one record.

    Classification runs before the insert; the insert is a single commit, so
    a failure at either step leaves nothing behind.
    """
    coordinate = request.coordinate()

    try:
        report = classify(coordinate)
    except Exception as e:
        logger.exception("Land classification failed")
        raise LandRecError(f"Classification failed: {e}") from e

    logger.info(
        f"Classified ({coordinate.latitude:.4f}, {coordinate.longitude:.4f}) "
        f"as {report.terrain} for {owner.id}"
    )

    return store.insert(
        owner_id=owner.id,
        coordinate=coordinate,
        image=request.image_data,
        report=report,
        notes=request.notes,
    )
