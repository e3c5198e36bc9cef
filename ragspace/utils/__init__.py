from .document import (
    content_type_to_mime_type,
    extract_content_from_metadata,
    store_content_in_metadata,
)
from .id_generator import generate_id
from .logging import get_logger, setup_logging
from .time_utils import get_timestamp_ms

__all__ = [
    "generate_id",
    "get_logger",
    "setup_logging",
    "get_timestamp_ms",
    "content_type_to_mime_type",
    "extract_content_from_metadata",
    "store_content_in_metadata",
]
