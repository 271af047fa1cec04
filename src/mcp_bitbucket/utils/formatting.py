"""Markdown formatting helpers shared by the CLI and MCP tool output."""

import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

T = TypeVar("T")

NOT_AVAILABLE = "Not available"
INVALID_DATE = "Invalid date"

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_DIFF_FILE_PATTERN = re.compile(r"diff --git a/(.*) b/(.*)")


def _parse_date(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date(value: str | datetime | None) -> str:
    """Format a date as `YYYY-MM-DD HH:MM:SS UTC`.

    Args:
        value: ISO 8601 string or datetime

    Returns:
        The formatted date, "Not available" when empty or "Invalid date"
    """
    if not value:
        return NOT_AVAILABLE
    try:
        return _parse_date(value).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (TypeError, ValueError):
        return INVALID_DATE


def format_relative_time(
    value: str | datetime | None, now: datetime | None = None
) -> str:
    """Format a date relative to now, e.g. "2 days ago"."""
    if not value:
        return NOT_AVAILABLE
    try:
        then = _parse_date(value)
    except (TypeError, ValueError):
        return INVALID_DATE

    current = now or datetime.now(timezone.utc)
    seconds = int((current - then).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    months = days // 30
    years = months // 12

    for amount, unit in (
        (years, "year"),
        (months, "month"),
        (days, "day"),
        (hours, "hour"),
        (minutes, "minute"),
    ):
        if amount > 0:
            return f"{amount} {unit}{'' if amount == 1 else 's'} ago"
    return f"{seconds} second{'' if seconds == 1 else 's'} ago"


def format_url(url: str | None, title: str | None = None) -> str:
    """Format a URL as a markdown link."""
    if not url:
        return NOT_AVAILABLE
    return f"[{title or url}]({url})"


def format_pagination(
    total_items: int, has_more: bool, next_cursor: str | None = None
) -> str:
    """Format the footer describing the current page of results."""
    plural = "" if total_items == 1 else "s"
    if not has_more:
        return f"*Showing {total_items} item{plural}.*"
    lines = [f"*Showing {total_items} item{plural}. More results are available.*"]
    if next_cursor:
        lines.append("")
        lines.append(f"*Next cursor: `{next_cursor}`*")
    return "\n".join(lines)


def format_heading(text: str, level: int = 1) -> str:
    """Format a markdown heading; the level is clamped to 1..6."""
    level = min(max(level, 1), 6)
    return f"{'#' * level} {text}"


def _format_value(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return format_date(value)
    if isinstance(value, Mapping) and isinstance(value.get("url"), str):
        return format_url(value["url"], value.get("title"))
    if isinstance(value, str):
        if value.startswith(("http://", "https://")):
            return format_url(value)
        if _ISO_DATE_PATTERN.match(value):
            return format_date(value)
        return value
    return str(value)


def format_bullet_list(
    items: Mapping[str, Any], key_formatter: Callable[[str], str] | None = None
) -> str:
    """Format key/value pairs as `- **key**: value` lines, skipping None."""
    lines = []
    for key, value in items.items():
        if value is None:
            continue
        label = key_formatter(key) if key_formatter else key
        lines.append(f"- **{label}**: {_format_value(value)}")
    return "\n".join(lines)


def format_separator() -> str:
    return "---"


def format_numbered_list(
    items: Iterable[T], formatter: Callable[[T, int], str]
) -> str:
    """Format items with a separator between each entry."""
    rendered = [formatter(item, index) for index, item in enumerate(items)]
    if not rendered:
        return "No items."
    return f"\n\n{format_separator()}\n\n".join(rendered)


def format_diff(
    raw_diff: str | None, max_files: int = 5, max_lines_per_file: int = 100
) -> str:
    """Render a unified diff as per-file fenced `diff` blocks.

    Args:
        raw_diff: Raw unified diff text
        max_files: Maximum number of files rendered
        max_lines_per_file: Maximum number of lines rendered per file

    Returns:
        Markdown with truncation notices where limits were hit
    """
    if not raw_diff or not raw_diff.strip():
        return "*No changes found in this pull request.*"

    output: list[str] = []
    file_count = 0
    line_count = 0
    in_file = False
    truncated = False

    for line in raw_diff.split("\n"):
        if line.startswith("diff --git"):
            if in_file:
                output.extend(["```", ""])
                in_file = False

            file_count += 1
            if file_count > max_files:
                truncated = True
                break

            match = _DIFF_FILE_PATTERN.match(line)
            current_file = match.group(1) if match else "unknown file"
            output.extend([f"### {current_file}", "", "```diff"])
            in_file = True
            line_count = 0
        elif in_file:
            line_count += 1
            if line_count > max_lines_per_file:
                output.extend(
                    ["// ... more lines omitted for brevity ...", "```", ""]
                )
                in_file = False
                continue
            output.append(line)

    if in_file:
        output.append("```")

    if truncated:
        output.extend(
            ["", f"*Output truncated. Only showing the first {max_files} files.*"]
        )
    return "\n".join(output)


def optimize_bitbucket_markdown(markdown: str | None) -> str:
    """Tidy markdown authored in Bitbucket for display.

    Normalizes line endings, trims trailing whitespace and collapses runs of
    blank lines outside fenced code blocks.
    """
    if not markdown:
        return ""

    lines: list[str] = []
    in_code_block = False
    blank_run = 0
    for line in markdown.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if line.lstrip().startswith("```"):
            in_code_block = not in_code_block
        if in_code_block:
            lines.append(line)
            blank_run = 0
            continue
        line = line.rstrip()
        if not line:
            blank_run += 1
            if blank_run > 1:
                continue
        else:
            blank_run = 0
        lines.append(line)
    return "\n".join(lines).strip("\n")


def information_footer(now: datetime | None = None) -> list[str]:
    """Lines closing list and detail views with a retrieval timestamp."""
    timestamp = format_date(now or datetime.now(timezone.utc))
    return [f"\n\n{format_separator()}", f"*Information retrieved at: {timestamp}*"]


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."
