# app/services/vin_validator.py
"""
VIN structural validation and decoding helpers.
Pure functions - no database or network access.

Rules:
  - exactly 17 characters after cleaning (hard error)
  - letters I, O, Q are never used in a VIN (hard error)
  - position 9 is a check digit; a mismatch is a warning unless VIN_CHECKSUM_STRICT is set
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.config import settings

VIN_LENGTH = 17
CHECK_DIGIT_INDEX = 8
WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)
TRANSLITERATION = {
    **{str(d): d for d in range(10)},
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
}
FORBIDDEN_CHARS = re.compile(r"[IOQ]")

# Position 10 model-year codes, 30-year cycle starting 1980
YEAR_CODES = "ABCDEFGHJKLMNPRSTVWXY123456789"

# World Manufacturer Identifiers for common motorcycle makes
MOTORCYCLE_WMI = {
    "JH2": "Honda", "JH3": "Honda",
    "JYA": "Yamaha", "JYM": "Yamaha",
    "1HD": "Harley-Davidson", "5HD": "Harley-Davidson", "MEX": "Harley-Davidson",
    "JS1": "Suzuki", "JS2": "Suzuki",
    "JKA": "Kawasaki", "JKB": "Kawasaki",
    "ZDM": "Ducati", "ZD3": "Ducati",
}


@dataclass
class VinValidationResult:
    vin: str
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


def clean_vin(raw: str) -> str:
    """Upper-case and drop everything that is not A-Z / 0-9."""
    return re.sub(r"[^A-Z0-9]", "", (raw or "").upper())


def compute_check_digit(vin: str) -> Optional[str]:
    """
    Expected check character for a 17-char VIN, or None if any
    position has no transliteration value (e.g. I, O, Q).
    """
    if len(vin) != VIN_LENGTH:
        return None
    total = 0
    for i, ch in enumerate(vin):
        if i == CHECK_DIGIT_INDEX:
            continue
        value = TRANSLITERATION.get(ch)
        if value is None:
            return None
        total += value * WEIGHTS[i]
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def has_valid_checksum(vin: str) -> bool:
    expected = compute_check_digit(vin)
    return expected is not None and vin[CHECK_DIGIT_INDEX] == expected


def validate_vin(vin: str, strict: Optional[bool] = None) -> VinValidationResult:
    if strict is None:
        strict = settings.VIN_CHECKSUM_STRICT

    errors, warnings = [], []
    if len(vin) != VIN_LENGTH:
        errors.append("VIN must be exactly 17 characters")
    if FORBIDDEN_CHARS.search(vin):
        errors.append("VIN cannot contain letters I, O, or Q")

    if len(vin) == VIN_LENGTH and not has_valid_checksum(vin):
        msg = "VIN checksum validation failed - this may not be a real VIN"
        (errors if strict else warnings).append(msg)

    return VinValidationResult(vin=vin, is_valid=not errors, errors=errors, warnings=warnings)


def decode_model_year(vin: str, today: Optional[datetime] = None) -> Optional[int]:
    """Most recent model year for the position-10 code that is not in the future."""
    if len(vin) != VIN_LENGTH:
        return None
    idx = YEAR_CODES.find(vin[9])
    if idx < 0:
        return None
    current_year = (today or datetime.utcnow()).year
    year = 1980 + idx
    while year + 30 <= current_year + 1:
        year += 30
    return year


def decode_make(vin: str) -> str:
    return MOTORCYCLE_WMI.get(vin[:3], "Unknown")
