"""
Tag normalization and (de)serialization.

Tags are stored as one comma-delimited string and exposed as an ordered list.
"""
from typing import Iterable, List, Optional, Union

TAG_DELIMITER = ","

TagInput = Union[str, Iterable[str], None]


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(TAG_DELIMITER)]


def normalize_tags(tags: TagInput) -> List[str]:
    """
    Normalize user-supplied tags.

    Accepts a comma-joined string or an iterable of strings (whose items may
    themselves be comma-joined). Tags are trimmed; empty strings and repeats
    are dropped, keeping the first occurrence.

    Examples:
        normalize_tags(["x", " y ", ""])  -> ["x", "y"]
        normalize_tags("a, b,,a")         -> ["a", "b"]
    """
    if tags is None:
        return []
    items = [tags] if isinstance(tags, str) else list(tags)

    normalized: List[str] = []
    seen = set()
    for item in items:
        if item is None:
            continue
        for tag in _split(str(item)):
            if tag and tag not in seen:
                seen.add(tag)
                normalized.append(tag)
    return normalized


def serialize_tags(tags: TagInput) -> str:
    """Normalize tags and join them into the stored form."""
    return TAG_DELIMITER.join(normalize_tags(tags))


def deserialize_tags(stored: Optional[str]) -> List[str]:
    """Split the stored form back into a list, dropping empty entries."""
    if not stored:
        return []
    return [tag for tag in _split(stored) if tag]
