# landrec/utils/coordinates.py
# Coordinate helpers for captured GPS fixes

from typing import Optional


def deg_to_dms(angle_deg: float, positive: str, negative: str) -> str:
    hemi = positive if angle_deg >= 0 else negative
    angle = abs(angle_deg)
    deg = int(angle)
    min_float = (angle - deg) * 60
    minute = int(min_float)
    sec = (min_float - minute) * 60
    return f"{deg:d}°{minute:02d}'{sec:05.2f}\"{hemi}"


def format_lat_lon(lat: float, lon: float, digits: int = 4) -> str:
    """Short form used in history listings, e.g. ``10.0000°, 20.0000°``."""
    return f"{lat:.{digits}f}°, {lon:.{digits}f}°"


def format_lat_lon_dms(lat: float, lon: float) -> str:
    return f"{deg_to_dms(lat, 'N', 'S')} {deg_to_dms(lon, 'E', 'W')}"


def format_meters(value: Optional[float], digits: int = 1) -> str:
    if value is None:
        return "n/a"
    return f"{value:.{digits}f} m"
