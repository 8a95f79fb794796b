# landrec/client.py
"""
HTTP client for the land recognition API, used by capture front-ends.

Failures are translated back into ``landrec.errors`` kinds so callers
handle remote and local stores the same way.
"""

from typing import List, Optional

import requests
from loguru import logger

from landrec.config import get_settings
from landrec.errors import AuthError, NotFoundError, PersistenceError, ValidationError
from landrec.schemas.analyze_land import AnalysisRow, AnalyzeLandResponse
from landrec.schemas.land import AnalysisRecord, Coordinate


class LandAnalysisClient:

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30.0, http=None):
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def _request(self, method: str, path: str, token: str, **kwargs):
        headers = {"Authorization": f"Bearer {token}"}
        try:
            resp = self.http.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise PersistenceError("Could not reach the analysis service") from e

        if resp.status_code < 400:
            return resp

        try:
            message = resp.json().get("error")
        except ValueError:
            message = None
        message = message or f"HTTP {resp.status_code}"

        if resp.status_code == 401:
            raise AuthError(message)
        if resp.status_code == 404:
            raise NotFoundError(message)
        if resp.status_code in (400, 422):
            raise ValidationError(message)
        raise PersistenceError(message)

    # ---------------- SUBMIT ----------------

    def analyze_land(self, token: str, coordinate: Coordinate, image_data: str,
                     notes: Optional[str] = None) -> AnalysisRecord:
        body = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "altitude": coordinate.altitude,
            "accuracy": coordinate.accuracy,
            "imageData": image_data,
            "notes": notes,
        }
        resp = self._request("POST", "/analyze-land", token, json=body)
        return AnalyzeLandResponse.model_validate(resp.json()).data.to_record()

    # ---------------- HISTORY ----------------

    def list_analyses(self, token: str) -> List[AnalysisRecord]:
        resp = self._request("GET", "/analyses", token)
        return [AnalysisRow.model_validate(row).to_record() for row in resp.json()]

    def get_analysis(self, token: str, analysis_id: str) -> AnalysisRecord:
        resp = self._request("GET", f"/analyses/{analysis_id}", token)
        return AnalysisRow.model_validate(resp.json()).to_record()

    def delete_analysis(self, token: str, analysis_id: str) -> None:
        self._request("DELETE", f"/analyses/{analysis_id}", token)

    def download_report_pdf(self, token: str, analysis_id: str) -> bytes:
        return self._request("GET", f"/analyses/{analysis_id}/report/pdf", token).content


class RemoteRecordStore:
    """Record store view over the API for the signed-in user of ``context``."""

    def __init__(self, client: LandAnalysisClient, context):
        self.client = client
        self.context = context

    def _token_for(self, owner_id: str) -> str:
        if self.context.identity is None or self.context.identity.id != owner_id:
            raise AuthError("Not signed in as this user")
        return self.context.require_token()

    def list_by_owner(self, owner_id: str) -> List[AnalysisRecord]:
        return self.client.list_analyses(self._token_for(owner_id))

    def delete_by_id(self, owner_id: str, analysis_id: str) -> None:
        self.client.delete_analysis(self._token_for(owner_id), analysis_id)
