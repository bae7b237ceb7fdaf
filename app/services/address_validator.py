"""
Server-side checks for booking meeting locations.

Hard errors block a booking; warnings are only logged by the caller.
Virtual meetings skip every check.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

# Places that are not acceptable for a first meeting
UNSAFE_KEYWORDS = [
    "basement", "cellar", "attic", "bedroom",
    "my house", "my home", "my place", "my apartment", "my room",
    "private room", "private residence",
    "fake street", "fake address", "nowhere",
    "abandoned", "warehouse", "storage", "garage", "shed", "cabin",
    "motel room", "back alley", "dark alley",
]

PUBLIC_VENUE_HINTS = [
    "restaurant", "cafe", "coffee", "hotel", "mall", "shopping", "park",
    "library", "museum", "gallery", "theatre", "cinema", "store", "shop",
    "plaza", "square", "station", "airport", "university", "college",
    "hospital", "clinic", "gym", "fitness", "community", "convention",
    "business", "office", "public",
    "street", "avenue", "road", "boulevard", "highway", "center", "centre",
]

PLACEHOLDERS = {"test", "testing", "asdf", "qwerty"}


@dataclass
class AddressValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def find_unsafe_keyword(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    lowered = address.lower()
    for keyword in UNSAFE_KEYWORDS:
        if keyword in lowered:
            return keyword
    return None


def looks_public(address: Optional[str]) -> bool:
    if not address:
        return False
    lowered = address.lower()
    return any(hint in lowered for hint in PUBLIC_VENUE_HINTS)


def structure_errors(address: Optional[str]) -> List[str]:
    if not address or not address.strip():
        return ["Address is required"]

    trimmed = address.strip()
    errors = []
    if len(trimmed) < 10:
        errors.append("Address is too short. Please provide a complete address.")
    if not re.search(r"\d", trimmed) and "," not in trimmed:
        errors.append("Address must include street number and proper formatting")
    if " " not in trimmed:
        errors.append("Address appears to be invalid (missing spaces)")
    if trimmed.lower() in PLACEHOLDERS:
        errors.append("Please provide a real address")
    return errors


def coordinate_errors(lat: Optional[float], lon: Optional[float]) -> List[str]:
    if lat is None and lon is None:
        return []
    if lat is None or lon is None:
        return ["Invalid coordinates provided"]

    errors = []
    if not -90 <= lat <= 90:
        errors.append("Invalid latitude value")
    if not -180 <= lon <= 180:
        errors.append("Invalid longitude value")
    if lat == 0 and lon == 0:
        errors.append("Invalid location coordinates (null island)")
    return errors


def validate_meeting_location(
    meeting_location: Optional[str],
    meeting_type: str,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
) -> AddressValidation:
    if meeting_type == "virtual":
        return AddressValidation(is_valid=True)

    errors = []
    keyword = find_unsafe_keyword(meeting_location)
    if keyword:
        errors.append(f'Unsafe location detected: "{keyword}". Please select a public venue.')
    errors.extend(structure_errors(meeting_location))

    warnings = []
    if not errors and not looks_public(meeting_location):
        warnings.append("Location may not be a public venue. Please ensure you select a safe, public meeting place.")

    errors.extend(coordinate_errors(lat, lon))
    return AddressValidation(is_valid=not errors, errors=errors, warnings=warnings)
