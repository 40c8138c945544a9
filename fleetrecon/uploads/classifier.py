# fleetrecon/uploads/classifier.py

"""
File Classifier

Decides (platform, file type) for an uploaded CSV by looking at its header
line only. Vendors rename and reorder columns, so matching is done on
case-folded substrings of the whole header line rather than on parsed
column lists. Rules are evaluated in order and the first match wins.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from fleetrecon.uploads.models import FileType, Platform

BOM = "\ufeff"


@dataclass(frozen=True)
class FileClassification:
    platform: Platform
    file_type: FileType


# (required substrings, platform, file type), first match wins
CLASSIFICATION_RULES: Tuple[Tuple[Tuple[str, ...], Platform, FileType], ...] = (
    (("kennzeichen", "fahrtpreis"), Platform.BOLT, FileType.TRIPS),
    (("kennzeichen", "zeitpunkt der fahrtbestellung"), Platform.UBER, FileType.TRIPS),
    (("an dein unternehmen gezahlt",), Platform.UBER, FileType.PAYMENTS),
    (("nettoeinnahmen", "fahrer"), Platform.BOLT, FileType.PAYMENTS),
    (("kampagne", "vorname des fahrers"), Platform.UBER, FileType.CAMPAIGN),
    (("kampagne", "fahrer"), Platform.BOLT, FileType.CAMPAIGN),
    (("beschreibung", "betrag"), Platform.UBER, FileType.PAYMENTS),
)


def classify_header(header_line: Optional[str]) -> Optional[FileClassification]:
    """
    Classify a CSV header line.

    Returns None for empty or unrecognized headers, never raises.
    """
    if not header_line:
        return None

    header = header_line.replace(BOM, "").strip().casefold()
    if not header:
        return None

    for markers, platform, file_type in CLASSIFICATION_RULES:
        if all(marker in header for marker in markers):
            return FileClassification(platform=platform, file_type=file_type)
    return None


def read_header_line(content: bytes) -> str:
    """Decode just the first line of a file"""
    first_line = content.split(b"\n", 1)[0]
    return first_line.decode("utf-8-sig", errors="replace").rstrip("\r")


def classify_content(content: bytes) -> Optional[FileClassification]:
    return classify_header(read_header_line(content))
