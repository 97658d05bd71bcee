"""
Utility functions for the Prompt Library application.
Contains pure helpers for tags, timestamps and record ids.
"""

# Tag utilities
from prompt_library.utils.tags import (
    TAG_DELIMITER,
    normalize_tags,
    serialize_tags,
    deserialize_tags
)

# Timestamp and id utilities
from prompt_library.utils.timestamp_utils import (
    utc_now_iso,
    new_record_id
)

__all__ = [
    # Tag utilities
    "TAG_DELIMITER",
    "normalize_tags",
    "serialize_tags",
    "deserialize_tags",

    # Timestamp and id utilities
    "utc_now_iso",
    "new_record_id",
]
