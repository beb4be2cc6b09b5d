"""Heatmap generation and the end-to-end engine facade."""

from .heatmap import Heatmap, HeatmapGenerator, top_suggestions
from .orchestrator import EquityEngine, MeetingEvaluation, OptimalTimes, RequestTracker

__all__ = [
    "Heatmap",
    "HeatmapGenerator",
    "top_suggestions",
    "EquityEngine",
    "MeetingEvaluation",
    "OptimalTimes",
    "RequestTracker",
]
