"""I/O utilities for CSV import/export."""

from .export_csv import export_heatmap_csv, export_statuses_csv, heatmap_to_frame, statuses_to_frame
from .import_csv import read_participants_csv, read_policies_csv

__all__ = [
    "read_participants_csv",
    "read_policies_csv",
    "export_heatmap_csv",
    "export_statuses_csv",
    "heatmap_to_frame",
    "statuses_to_frame",
]
