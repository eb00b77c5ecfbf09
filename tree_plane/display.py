from datetime import datetime, timezone

from tree_plane.base import Commit
from tree_plane.ops import StatusReport

LOG_DELIMITER = "==="


def format_timestamp(ts: datetime) -> str:
    """Render like `Thu Jan 1 00:00:00 1970 +0000`, always in UTC."""
    ts = ts.astimezone(timezone.utc)
    return f"{ts:%a %b} {ts.day} {ts:%H:%M:%S %Y %z}"


def format_log_entry(commit: Commit) -> str:
    return "\n".join(
        [
            LOG_DELIMITER,
            f"commit {commit.id}",
            f"Date: {format_timestamp(commit.timestamp)}",
            commit.message,
            "",
        ]
    )


def format_status(report: StatusReport) -> str:
    branches = [
        f"*{name}" if name == report.current_branch else name
        for name in report.branches
    ]
    sections = [
        ("Branches", branches),
        ("Staged Files", report.staged),
        ("Removed Files", report.removed),
        ("Modifications Not Staged For Commit", report.modified),
        ("Untracked Files", report.untracked),
    ]
    lines: list[str] = []
    for title, entries in sections:
        lines.append(f"=== {title} ===")
        lines.extend(entries)
        lines.append("")
    return "\n".join(lines)
