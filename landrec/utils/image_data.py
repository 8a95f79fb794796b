# landrec/utils/image_data.py
"""
Conversions between captured images and the ``data:`` URLs sent as
``imageData`` in ``POST /analyze-land``.
"""

import base64
import binascii
import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from landrec.errors import ValidationError
from landrec.schemas.land import CapturedImage

DATA_URL_PREFIX = "data:"


def to_data_url(image: CapturedImage) -> str:
    payload = base64.b64encode(image.data).decode("ascii")
    return f"{DATA_URL_PREFIX}{image.encoding};base64,{payload}"


def parse_data_url(image_data: str) -> Tuple[str, bytes]:
    """Split a base64 ``data:`` URL into (encoding, raw bytes)."""
    if not image_data.startswith(DATA_URL_PREFIX) or "," not in image_data:
        raise ValidationError("Image data is not a data URL")

    header, payload = image_data[len(DATA_URL_PREFIX):].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        raise ValidationError("Image data must be base64 encoded")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")

    return parts[0] or "application/octet-stream", raw


def probe_image(data: bytes, encoding: str = "") -> CapturedImage:
    """Decode raw bytes with Pillow and record the real format and size."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Invalid image file.")

    if fmt:
        encoding = Image.MIME.get(fmt, encoding)

    return CapturedImage(data=data, encoding=encoding or "image/jpeg", width=width, height=height)


def from_data_url(image_data: str) -> CapturedImage:
    encoding, raw = parse_data_url(image_data)
    return probe_image(raw, encoding)


def encode_jpeg(img: Image.Image, quality: int = 80) -> CapturedImage:
    """Compress a frame the way the browser camera did (JPEG, quality 0.8)."""
    buf = io.BytesIO()
    img.convert("RGB").save(buf, format="JPEG", quality=quality)
    return CapturedImage(data=buf.getvalue(), encoding="image/jpeg", width=img.width, height=img.height)
