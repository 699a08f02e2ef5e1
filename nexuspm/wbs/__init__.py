"""Work-breakdown structure projects."""

from .assembler import build_wbs_project
from .extractor import extract_wbs_item
from .rollup import calculate_progress, summarize_project

__all__ = [
    "build_wbs_project",
    "calculate_progress",
    "extract_wbs_item",
    "summarize_project",
]
