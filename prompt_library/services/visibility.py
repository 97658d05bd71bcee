"""
Derived-state resolver: which prompts count as active.

A prompt is effectively active when its own flag is set and, if it came from
an upload, that upload is active too. Two listing policies exist and are kept
apart on purpose:

- VisibilityMode.DASHBOARD: the prompt's own isActive flag only.
- VisibilityMode.MANAGEMENT: the combined rule above.
"""
from typing import Iterable, List, Optional, Protocol

from prompt_library.models.domain import VisibilityMode


class _PromptLike(Protocol):
    is_active: bool
    history_id: Optional[str]


class _HistoryLike(Protocol):
    id: str
    is_active: bool


def effective_active(prompt: _PromptLike, history: Optional[_HistoryLike] = None) -> bool:
    """
    Combine a prompt's own flag with its source upload's flag.

    Args:
        prompt: Prompt (ORM row or PromptResponse)
        history: The upload history entry referenced by prompt.history_id, if it exists

    Returns:
        True if the prompt should be shown in management views

    A prompt whose history_id points at a missing upload is treated as
    inactive, the same answer the LEFT JOIN in the store gives.
    """
    if not prompt.is_active:
        return False
    if not prompt.history_id:
        return True
    if history is None or history.id != prompt.history_id:
        return False
    return bool(history.is_active)


def is_visible(prompt, mode: VisibilityMode) -> bool:
    """
    Decide visibility of a joined PromptResponse under a listing mode.
    """
    if mode == VisibilityMode.DASHBOARD:
        return bool(prompt.is_active)
    if mode == VisibilityMode.MANAGEMENT:
        return bool(prompt.is_active) and bool(prompt.history_is_active)
    raise ValueError(f"Unknown visibility mode: {mode!r}")


def filter_visible(prompts: Iterable, mode: VisibilityMode) -> List:
    """Keep the prompts visible under mode, preserving order."""
    return [prompt for prompt in prompts if is_visible(prompt, mode)]
