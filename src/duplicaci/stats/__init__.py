"""Storage statistics parsed from duplicacy check output."""

from .models import DayStats, RepoStats, StorageStats
from .parser import (
    StatsParseError,
    format_bytes,
    parse_check_output,
    parse_number,
    parse_size,
    today_date,
)
from .writer import StatsWriteError, StatsWriter

__all__ = [
    "DayStats",
    "RepoStats",
    "StorageStats",
    "StatsParseError",
    "StatsWriteError",
    "StatsWriter",
    "format_bytes",
    "parse_check_output",
    "parse_number",
    "parse_size",
    "today_date",
]
