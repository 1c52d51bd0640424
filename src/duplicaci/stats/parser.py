"""Parse ``duplicacy check -tabular`` output into statistics.

The report mixes log lines with one table per repository::

    INFO SNAPSHOT_CHECK Total chunk size is 4,617M in 975 chunks
                 snap | rev |                    | files |  bytes | chunks |    bytes | uniq |    bytes | new | bytes |
     appdata_backup |   1 | @ 2025-10-13 20:34 |    28 | 3,384M |    195 | 991,477K |   32 | 164,900K | 195 | 991,477K |
     appdata_backup | all |                    |       |        |    883 |   4,608M |  883 |   4,608M |     |          |

Revision rows are counted per repository; the ``all`` row carries the
repository totals.
"""

import re
from datetime import date

from .models import DayStats, RepoStats

CHECKED_STATUS = "Checked"

SIZE_MULTIPLIERS = {
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}

TOTAL_CHUNKS_RE = re.compile(r"Total chunk size is ([\d,]+[KMGT]?) in ([\d,]+) chunks")
# snap | rev | date | files | bytes | chunks | bytes | uniq | bytes | new | bytes
ALL_ROW_RE = re.compile(
    r"^\s*(\S+)\s*\|\s*all\s*\|[^|]*\|[^|]*\|[^|]*\|"
    r"\s*([\d,]+)\s*\|\s*([\d,]+[KMGT]?)\s*\|\s*([\d,]+)\s*\|\s*([\d,]+[KMGT]?)\s*\|"
)
REVISION_RE = re.compile(r"^\s*(\S+)\s*\|\s*(\d+)\s*\|\s*@")


class StatsParseError(ValueError):
    """Check output or one of its values could not be parsed."""

    pass


def parse_size(value: str) -> int:
    """Convert a size such as ``4,617M`` or ``8,853K`` to bytes.

    Suffixes are 1024-based. An empty value is zero.

    Raises:
        StatsParseError: If the magnitude is not a number
    """
    s = value.strip().replace(",", "")
    if not s:
        return 0

    multiplier = 1
    if s[-1] in SIZE_MULTIPLIERS:
        multiplier = SIZE_MULTIPLIERS[s[-1]]
        s = s[:-1]

    # int() rejects inf and nan
    try:
        return int(float(s) * multiplier)
    except (ValueError, OverflowError) as e:
        raise StatsParseError(f"failed to parse size {value!r}") from e


def parse_number(value: str) -> int:
    """Convert a count such as ``10,000`` to an integer.

    Raises:
        StatsParseError: If the value is not a plain integer
    """
    s = value.strip().replace(",", "")
    if not s:
        return 0
    try:
        return int(s)
    except ValueError as e:
        raise StatsParseError(f"failed to parse number {value!r}") from e


def _lenient(parse, value: str) -> int:
    try:
        return parse(value)
    except StatsParseError:
        return 0


def parse_check_output(output: str) -> DayStats:
    """Parse check -tabular output into a DayStats.

    Raises:
        StatsParseError: If no repository ``all`` rows are present
    """
    stats = DayStats(status=CHECKED_STATUS)
    revision_counts: dict[str, int] = {}

    for line in output.splitlines():
        match = TOTAL_CHUNKS_RE.search(line)
        if match:
            stats.total_size = _lenient(parse_size, match.group(1))
            stats.total_chunks = _lenient(parse_number, match.group(2))
            continue

        match = REVISION_RE.search(line)
        if match:
            name = match.group(1)
            revision_counts[name] = revision_counts.get(name, 0) + 1
            continue

        match = ALL_ROW_RE.search(line)
        if match:
            name = match.group(1)
            # the unique chunk count (group 4) is not part of the stored stats
            stats.repositories[name] = RepoStats(
                revisions=revision_counts.get(name, 0),
                total_chunks=_lenient(parse_number, match.group(2)),
                total_size=_lenient(parse_size, match.group(3)),
                unique_size=_lenient(parse_size, match.group(5)),
            )

    if not stats.repositories:
        raise StatsParseError("no repository statistics found in check output")

    return stats


def today_date() -> str:
    """Today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def format_bytes(num_bytes: int) -> str:
    """Format bytes in human readable binary units, e.g. ``1.5 GB``."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{num_bytes / div:.1f} {'KMGTPE'[exp]}B"
