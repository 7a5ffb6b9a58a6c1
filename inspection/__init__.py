"""Board inspection package."""

from .pipeline import BoardInspector, InspectionReport, window_count

__all__ = [
    "BoardInspector",
    "InspectionReport",
    "window_count",
]
