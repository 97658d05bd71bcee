"""
Library analytics computed from a prompt listing.

Pure functions: the store loads prompts and history once and hands them here.
"""
from collections import Counter
from typing import Dict, List, Sequence

from prompt_library.models.schemas import (
    LibraryAnalytics,
    PromptResponse,
    RatingAnalytics,
    SourceCharacteristics,
    TagUsage,
    UploadHistoryResponse,
)

MOST_RATED_LIMIT = 5
RATING_LEVELS = (1, 2, 3, 4, 5)


def _mean(values: Sequence[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def _percentage(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 2) if whole else 0.0


def tag_usage(prompts: Sequence[PromptResponse]) -> List[TagUsage]:
    """
    Count tag occurrences; percentage is relative to all tag usages.
    Sorted by count (descending), then tag name.
    """
    counts = Counter(tag for prompt in prompts for tag in prompt.tags)
    total = sum(counts.values())
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [
        TagUsage(tag=tag, count=count, percentage=_percentage(count, total))
        for tag, count in ordered
    ]


def rating_analytics(prompts: Sequence[PromptResponse]) -> RatingAnalytics:
    """
    Average rating over rated prompts, 1-5 distribution, favorites and most-rated prompts.
    """
    rated = [prompt.rating for prompt in prompts if prompt.rating]
    distribution: Dict[int, int] = {level: 0 for level in RATING_LEVELS}
    for rating in rated:
        distribution[rating] += 1

    most_rated = sorted(
        (prompt for prompt in prompts if prompt.rating_count > 0),
        key=lambda prompt: (-prompt.rating_count, -(prompt.rating or 0), prompt.title),
    )[:MOST_RATED_LIMIT]

    return RatingAnalytics(
        average_rating=_mean(rated),
        rating_distribution=distribution,
        favorite_count=sum(1 for prompt in prompts if prompt.is_favorite),
        most_rated_prompts=most_rated,
    )


def source_characteristics(
    prompts: Sequence[PromptResponse],
    history: Sequence[UploadHistoryResponse],
) -> List[SourceCharacteristics]:
    """
    Per-upload statistics over the prompts that reference each upload.
    Uploads appear in the order given (newest first from the store).
    """
    by_source: Dict[str, List[PromptResponse]] = {}
    for prompt in prompts:
        if prompt.history_id:
            by_source.setdefault(prompt.history_id, []).append(prompt)

    sources = []
    for entry in history:
        members = by_source.get(entry.id, [])
        sources.append(
            SourceCharacteristics(
                history_id=entry.id,
                file_name=entry.file_name,
                is_active=entry.is_active,
                prompt_count=len(members),
                avg_content_length=_mean([len(prompt.content) for prompt in members]),
                avg_tags=_mean([len(prompt.tags) for prompt in members]),
                active_percentage=_percentage(
                    sum(1 for prompt in members if prompt.is_active), len(members)
                ),
            )
        )
    return sources


def build_analytics(
    prompts: Sequence[PromptResponse],
    history: Sequence[UploadHistoryResponse],
) -> LibraryAnalytics:
    """Assemble every analytics section for one listing."""
    return LibraryAnalytics(
        total_prompts=len(prompts),
        tag_usage=tag_usage(prompts),
        rating_analytics=rating_analytics(prompts),
        sources=source_characteristics(prompts, history),
    )
