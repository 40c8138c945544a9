# fleetrecon/ingest/exceptions.py

"""
Ingest Module Custom Exceptions

Row level problems never raise: bad rows are dropped by the extractors.
These exceptions cover call level failures only.
"""

from typing import Optional


class IngestError(Exception):
    """Base exception for all ingest errors"""
    pass


class NoFilesError(IngestError):
    """Raised when an ingest call carries zero files"""

    def __init__(self, message: str = "No files were uploaded"):
        super().__init__(message)


class FileTooLargeError(IngestError):
    """Raised when a single upload exceeds the configured size limit"""

    def __init__(self, filename: str, size: int, limit: int):
        self.filename = filename
        self.size = size
        self.limit = limit
        super().__init__(
            f"File '{filename}' is {size} bytes, the limit is {limit} bytes"
        )


class ExtractorNotFoundError(IngestError):
    """Raised when no extractor is registered for a (platform, file type) pair"""
    pass


class IngestFailedError(IngestError):
    """
    Raised when an ingest call aborts part way

    Examples:
    - Database unavailable or constraint failure other than duplicates
    - Unexpected error inside an extractor

    Batches committed before the failure stay in the store; re-running the
    same upload is safe because inserts ignore duplicates.
    """

    def __init__(
        self,
        message: str,
        unclassified_count: int = 0,
        filename: Optional[str] = None,
        phase: Optional[str] = None,
    ):
        self.message = message
        self.unclassified_count = unclassified_count
        self.filename = filename
        self.phase = phase
        super().__init__(message)
