"""
Domain enumerations shared by the store, the API and the CLI.
"""
from enum import Enum


class HistoryStatus(str, Enum):
    """Outcome of a batch import."""
    SUCCESS = "success"
    ERROR = "error"


class VisibilityMode(str, Enum):
    """
    How a listing decides whether a prompt is shown.

    DASHBOARD looks only at the prompt's own isActive flag.
    MANAGEMENT also requires the prompt's source upload (if any) to be active.
    """
    DASHBOARD = "dashboard"
    MANAGEMENT = "management"
