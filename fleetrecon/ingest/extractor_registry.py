# fleetrecon/ingest/extractor_registry.py

"""
Extractor Registry - Decorator-based registry for record extractors

Each (platform, file type) pair has exactly one extractor function. Extractors
register themselves with the @extractor decorator and are discovered by
importing the extractor modules once at startup.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps
from typing import Callable, Dict, List, Optional, Set, Tuple

from fleetrecon.ingest.exceptions import ExtractorNotFoundError
from fleetrecon.uploads.models import FileType, Platform
from fleetrecon.utils.logger import get_logger

logger = get_logger(__name__)

BatchSink = Callable[[List[dict]], None]
RowCallback = Callable[[int], None]


@dataclass
class ExtractResult:
    """Outcome of running one extractor over one file"""

    platform: Platform
    file_type: FileType
    count: int = 0
    skipped: int = 0
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    company_name: Optional[str] = None

    def record_date(self, value: datetime) -> None:
        if self.min_date is None or value < self.min_date:
            self.min_date = value
        if self.max_date is None or value > self.max_date:
            self.max_date = value


@dataclass
class ExtractContext:
    """
    Per-call state handed to every extractor

    The dedup sets live for one ingest call only, so concurrent calls for
    different sessions never share state.
    """

    session_id: str
    on_batch: BatchSink
    seen_keys: Set[str] = field(default_factory=set)
    batch_size: int = 1000
    on_rows: Optional[RowCallback] = None
    upload_id: Optional[int] = None


ExtractorFunction = Callable[[bytes, ExtractContext], ExtractResult]


@dataclass
class ExtractorMetadata:
    """Metadata for a registered extractor"""

    platform: Platform
    file_type: FileType
    function: ExtractorFunction
    description: Optional[str] = None


# Global registry storage
EXTRACTOR_REGISTRY: Dict[Tuple[Platform, FileType], ExtractorMetadata] = {}


def extractor(platform: Platform, file_type: FileType, description: Optional[str] = None):
    """
    Decorator to register an extractor function.

    Example:
        @extractor(Platform.UBER, FileType.TRIPS, description="Uber trip log")
        def extract_uber_trips(content, context):
            ...
    """

    def decorator(func: ExtractorFunction) -> ExtractorFunction:
        key = (platform, file_type)
        if key in EXTRACTOR_REGISTRY:
            logger.warning(f"Extractor for {platform.value}/{file_type.value} is already registered. Overwriting.")

        EXTRACTOR_REGISTRY[key] = ExtractorMetadata(
            platform=platform,
            file_type=file_type,
            function=func,
            description=description,
        )
        logger.debug(f"Registered extractor: {platform.value}/{file_type.value} -> {func.__name__}")

        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        return wrapper

    return decorator


def get_extractor(platform: Platform, file_type: FileType) -> ExtractorMetadata:
    metadata = EXTRACTOR_REGISTRY.get((platform, file_type))
    if metadata is None:
        raise ExtractorNotFoundError(
            f"No extractor registered for {platform.value}/{file_type.value}"
        )
    return metadata


def list_extractors() -> List[ExtractorMetadata]:
    return list(EXTRACTOR_REGISTRY.values())


def import_extractors() -> None:
    """
    Import all extractor modules to trigger registration.
    Safe to call more than once.
    """
    from fleetrecon.ingest.extractors import bolt, uber  # noqa: F401

    logger.debug(f"Registered {len(EXTRACTOR_REGISTRY)} extractors")
