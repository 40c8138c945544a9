# fleetrecon/ingest/plates.py

"""
Plate / Driver Resolver

Payment descriptions are free text written by the platform. They sometimes
name the vehicle ("Prämie 700 Fahrten B-MU 1234") and sometimes embed
correlation UUIDs whose fragments look like plates ("...9ab-cd12-..."). The
resolver prefers returning no plate over returning a wrong one.
"""

import re
from typing import Optional

LICENSE_PLATE_PATTERN = re.compile(
    r"(?<![A-Za-z])[A-Z]{1,3}-[A-Z]{1,3}\s?\d{1,4}[A-Z]?", re.IGNORECASE
)

CANONICAL_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)

# A hex run glued to a hyphen: eight hex chars (UUID head) or a run of four or
# more mixing digits and a-f letters. Plain years ("2024-") and words do not match.
HEX_FRAGMENT_PATTERN = re.compile(
    r"(?:[0-9a-f]{8}-|-[0-9a-f]{8}"
    r"|(?=[0-9a-f]*[a-f])(?=[0-9a-f]*\d)[0-9a-f]{4,}-"
    r"|-(?=[0-9a-f]*[a-f])(?=[0-9a-f]*\d)[0-9a-f]{4,})",
    re.IGNORECASE,
)

UUID_CONTEXT_CHARS = 20

INCENTIVE_ACTION_MARKERS = ("aktion", "prämie", "praemie", "bonus", "incentive", "promotion")
TRIPS_MARKERS = ("fahrten", "trips")

_WHITESPACE = re.compile(r"\s+")


def normalize_plate(plate: Optional[str]) -> str:
    """Uppercase with all whitespace removed; empty string for None"""
    if not plate:
        return ""
    return _WHITESPACE.sub("", plate).upper()


def normalize_driver_name(*parts: Optional[str]) -> Optional[str]:
    """Join name parts with single spaces; None when nothing is left"""
    name = " ".join(part.strip() for part in parts if part and part.strip())
    name = _WHITESPACE.sub(" ", name)
    return name or None


def is_vehicle_incentive(description: str) -> bool:
    text = description.casefold()
    return (
        any(marker in text for marker in INCENTIVE_ACTION_MARKERS)
        and any(marker in text for marker in TRIPS_MARKERS)
    )


def _near_uuid(description: str, start: int, end: int) -> bool:
    before = description[max(0, start - UUID_CONTEXT_CHARS):start]
    after = description[end:end + UUID_CONTEXT_CHARS]
    if HEX_FRAGMENT_PATTERN.search(before) or HEX_FRAGMENT_PATTERN.search(after):
        return True

    window_start = max(0, start - UUID_CONTEXT_CHARS)
    window_end = end + UUID_CONTEXT_CHARS
    for uuid_match in CANONICAL_UUID_PATTERN.finditer(description):
        if uuid_match.start() < window_end and uuid_match.end() > window_start:
            return True
    return False


def extract_license_plate(description: Optional[str], incentives_only: bool = False) -> Optional[str]:
    """
    Find the vehicle plate named in a payment description.

    Args:
        description: free text from the vendor export
        incentives_only: only look at descriptions of vehicle based incentives
            (an incentive marker plus a trips marker), used for campaign rows

    Returns:
        Normalized plate, or None when absent, filtered or UUID adjacent
    """
    if not description:
        return None
    if incentives_only and not is_vehicle_incentive(description):
        return None

    match = LICENSE_PLATE_PATTERN.search(description)
    if match is None:
        return None
    if _near_uuid(description, match.start(), match.end()):
        return None
    return normalize_plate(match.group(0))
