# land_classifier.py
from typing import Optional

from landrec.schemas.land import CapturedImage, Coordinate, LandCharacteristicsReport

# -------------------------------
# Latitude bands
# -------------------------------
# Checked high to low; each lower bound is exclusive.

BANDS = [
    (60.0, {
        "terrain": "Tundra",
        "vegetation": "Low shrubs and mosses",
        "soilType": "Permafrost",
        "landUse": "Conservation",
        "features": ["Cold climate", "Limited growing season"],
        "recommendations": ["Consider cold-resistant crops", "Implement greenhouse farming"],
    }),
    (45.0, {
        "terrain": "Temperate hills",
        "vegetation": "Mixed forest",
        "soilType": "Clay-loam",
        "landUse": "Mixed use",
        "features": ["Four seasons", "Moderate rainfall", "Good drainage"],
        "recommendations": ["Suitable for diverse crops", "Consider fruit orchards", "Good for livestock"],
    }),
    (23.5, {
        "terrain": "Subtropical plains",
        "vegetation": "Dense vegetation",
        "soilType": "Rich organic soil",
        "landUse": "High-yield agriculture",
        "features": ["Long growing season", "High rainfall", "Fertile land"],
        "recommendations": ["Ideal for cash crops", "Multiple harvests possible", "Consider irrigation systems"],
    }),
]

TROPICAL = {
    "terrain": "Tropical",
    "vegetation": "Tropical plants",
    "soilType": "Laterite soil",
    "landUse": "Specialized agriculture",
    "features": ["Year-round growing", "High temperatures", "Heavy rainfall"],
    "recommendations": ["Focus on tropical crops", "Implement water management", "Consider agroforestry"],
}

GENERAL_RECOMMENDATIONS = [
    "Conduct soil testing",
    "Monitor water table levels",
    "Assess local climate patterns",
]


def band_for_latitude(latitude: float) -> dict:
    lat = abs(latitude)
    for lower, band in BANDS:
        if lat > lower:
            return band
    return TROPICAL


# -------------------------------
# Classification
# -------------------------------

def classify(coordinate: Coordinate, image: Optional[CapturedImage] = None) -> LandCharacteristicsReport:
    """
    Derive a land-characteristics report for a coordinate.

    Only the absolute latitude selects the band. Longitude and the image are
    accepted so callers pass the whole capture, but they do not change the
    result.
    """
    band = band_for_latitude(coordinate.latitude)

    return LandCharacteristicsReport(
        terrain=band["terrain"],
        vegetation=band["vegetation"],
        soilType=band["soilType"],
        landUse=band["landUse"],
        features=list(band["features"]),
        recommendations=list(band["recommendations"]) + GENERAL_RECOMMENDATIONS,
    )
