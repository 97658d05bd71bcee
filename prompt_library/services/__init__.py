"""
Services layer for the Prompt Library application.
Contains the store facade and the derived-state and analytics logic it uses.
"""

from prompt_library.services.visibility import (
    effective_active,
    is_visible,
    filter_visible
)

from prompt_library.services.analytics import (
    tag_usage,
    rating_analytics,
    source_characteristics,
    build_analytics
)

from prompt_library.services.prompt_store import (
    PromptStore,
    validate_rating,
    decode_prompt,
    decode_history
)

__all__ = [
    # Visibility
    "effective_active",
    "is_visible",
    "filter_visible",

    # Analytics
    "tag_usage",
    "rating_analytics",
    "source_characteristics",
    "build_analytics",

    # Store
    "PromptStore",
    "validate_rating",
    "decode_prompt",
    "decode_history",
]
