# app/utils/geo.py
"""
Geo helpers: great-circle distance and privacy masking of seller locations.
Only city / ZIP level data is ever used - street addresses are never exposed.
"""

import math
from typing import Optional

EARTH_RADIUS_KM = 6371.0

MAJOR_CITIES = (
    "Newark", "Jersey City", "Paterson", "Elizabeth", "Edison", "Woodbridge",
    "Lakewood", "Toms River", "Hamilton", "Trenton", "Clifton", "Camden",
    "Brick", "Cherry Hill", "Passaic", "Union City", "Middletown", "Gloucester",
    "Vineland", "Bayonne", "New Brunswick", "Hoboken", "Plainfield", "Westfield",
    "Paramus", "Hackensack", "Princeton", "Atlantic City",
)

COUNTY_MAP = {
    "Hoboken": "Hudson County", "Jersey City": "Hudson County", "Bayonne": "Hudson County",
    "Union City": "Hudson County", "Weehawken": "Hudson County",
    "New Brunswick": "Middlesex County", "Edison": "Middlesex County", "Woodbridge": "Middlesex County",
    "Princeton": "Mercer County", "Trenton": "Mercer County",
    "Camden": "Camden County", "Cherry Hill": "Camden County",
    "Atlantic City": "Atlantic County", "Vineland": "Cumberland County",
    "Paterson": "Passaic County", "Clifton": "Passaic County", "Passaic": "Passaic County",
    "Hackensack": "Bergen County", "Paramus": "Bergen County",
    "Toms River": "Ocean County", "Lakewood": "Ocean County", "Brick": "Ocean County",
    "Middletown": "Monmouth County",
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    # Returns great-circle distance in kilometers
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _is_major_city(city: str) -> bool:
    c = city.lower()
    return any(m.lower() in c or c in m.lower() for m in MAJOR_CITIES)


def _zip_region(zip_code: str) -> Optional[str]:
    try:
        prefix = int(zip_code[:2])
    except (TypeError, ValueError):
        return None
    # NJ ZIPs start 07 (north) and 08 (central/south)
    if prefix not in (7, 8):
        return None
    if prefix == 7:
        return "North"
    if zip_code[:3] >= "085":
        return "Central"
    return "South"


def mask_location(city: Optional[str], zip_code: Optional[str] = None, state: str = "NJ") -> dict:
    """
    Returns {masked, vicinity, general}:
      major city  → "<City> area"
      known town  → county
      otherwise   → North / Central / South region from the ZIP, else the state
    """
    if not city:
        return {"masked": "Location not specified", "vicinity": "New Jersey area", "general": state}

    if _is_major_city(city):
        return {"masked": f"{city} area", "vicinity": f"Near {city}, {state}", "general": f"{city}, {state}"}

    county = COUNTY_MAP.get(city)
    if county:
        return {"masked": county, "vicinity": f"{county}, {state}", "general": county}

    region = _zip_region(zip_code) if zip_code else None
    if region:
        return {
            "masked": f"{region} Jersey area",
            "vicinity": f"{region} Jersey, {state}",
            "general": f"{region} {state}",
        }
    return {"masked": "New Jersey area", "vicinity": "New Jersey", "general": state}
