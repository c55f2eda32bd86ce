"""
Utilities package for the HoopSync live stat-keeper client.

This package contains utility functions used throughout the application.
"""
from .time_utils import fmt_mmss, now_iso, parse_mmss
from .logging_utils import get_logger
from .constants import (
    APP_TITLE, PERIODS, PERIOD_LENGTH_SEC, EVENT_TYPES, POINT_VALUES,
    FLOOR_SIZE, PBP_WINDOW
)

__all__ = [
    "fmt_mmss", "now_iso", "parse_mmss", "get_logger",
    "APP_TITLE", "PERIODS", "PERIOD_LENGTH_SEC", "EVENT_TYPES",
    "POINT_VALUES", "FLOOR_SIZE", "PBP_WINDOW"
]
