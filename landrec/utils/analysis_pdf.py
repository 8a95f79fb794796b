# analysis_pdf.py
import io
from datetime import datetime, timezone

from loguru import logger
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from landrec.errors import ValidationError
from landrec.schemas.land import AnalysisRecord
from landrec.utils.coordinates import format_lat_lon, format_lat_lon_dms, format_meters
from landrec.utils.image_data import from_data_url


def generate_analysis_pdf(record: AnalysisRecord, filepath):

    c = canvas.Canvas(filepath, pagesize=A4)
    page_width, page_height = A4
    report = record.report
    coord = record.coordinate

    # ---------- PAGE 1 : TEXT SUMMARY ----------

    y = page_height - 50

    def line(text):
        nonlocal y
        c.drawString(50, y, text)
        y -= 18

    line("Land Analysis Report")
    line("=" * 50)
    line(f"Analysis ID: {record.id}")
    line(f"Captured: {record.created_at.isoformat()}")
    line(f"Generated: {datetime.now(timezone.utc).isoformat()}")
    line("")
    line(f"Location: {format_lat_lon(coord.latitude, coord.longitude)}")
    line(f"          {format_lat_lon_dms(coord.latitude, coord.longitude)}")
    line(f"Altitude: {format_meters(coord.altitude)}")
    line(f"Accuracy: {format_meters(coord.accuracy)}")
    line("")
    line(f"Terrain: {report.terrain}")
    line(f"Vegetation: {report.vegetation}")
    line(f"Soil type: {report.soil_type}")
    line(f"Land use: {report.land_use}")
    line("")

    line("Key features:")
    for feature in report.features:
        line(f"  - {feature}")

    line("")
    line("Recommendations:")
    for rec in report.recommendations:
        line(f"  - {rec}")

    if record.notes:
        line("")
        line("Notes:")
        for note_line in record.notes.splitlines():
            line(f"  {note_line}")

    c.showPage()

    # ---------- PAGE 2 : PHOTO ----------

    try:
        photo = from_data_url(record.image_url)
    except ValidationError as e:
        logger.warning(f"Analysis {record.id}: photo not embedded ({e.message})")
        photo = None

    if photo is not None:
        target_width = 500

        aspect_ratio = photo.height / photo.width
        target_height = target_width * aspect_ratio

        # Center position
        x = (page_width - target_width) / 2
        y = (page_height - target_height) / 2

        c.drawImage(
            ImageReader(io.BytesIO(photo.data)),
            x,
            y,
            width=target_width,
            height=target_height,
            preserveAspectRatio=True,
            mask='auto'
        )

        c.showPage()

    c.save()
