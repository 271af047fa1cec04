"""Tests for the markdown formatting helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from mcp_bitbucket.utils.formatting import (
    format_bullet_list,
    format_date,
    format_diff,
    format_heading,
    format_numbered_list,
    format_pagination,
    format_relative_time,
    format_url,
    information_footer,
    optimize_bitbucket_markdown,
    truncate,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-05-01T10:00:00+00:00", "2024-05-01 10:00:00 UTC"),
        ("2024-05-01T10:00:00Z", "2024-05-01 10:00:00 UTC"),
        ("2024-05-01T12:00:00+02:00", "2024-05-01 10:00:00 UTC"),
        ("2024-05-01T10:00:00.123456+00:00", "2024-05-01 10:00:00 UTC"),
        (None, "Not available"),
        ("", "Not available"),
        ("yesterday", "Invalid date"),
    ],
)
def test_format_date(value, expected):
    assert format_date(value) == expected


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=1), "1 second ago"),
        (timedelta(seconds=45), "45 seconds ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=65), "2 months ago"),
        (timedelta(days=800), "2 years ago"),
    ],
)
def test_format_relative_time(delta, expected):
    assert format_relative_time(NOW - delta, now=NOW) == expected


def test_format_relative_time_invalid():
    assert format_relative_time(None) == "Not available"
    assert format_relative_time("not a date") == "Invalid date"


def test_format_url():
    assert format_url("https://x.org") == "[https://x.org](https://x.org)"
    assert format_url("https://x.org", "X") == "[X](https://x.org)"
    assert format_url(None) == "Not available"


def test_format_pagination():
    assert format_pagination(1, False) == "*Showing 1 item.*"
    assert format_pagination(0, False) == "*Showing 0 items.*"
    assert format_pagination(25, True) == (
        "*Showing 25 items. More results are available.*"
    )
    assert format_pagination(25, True, "3") == (
        "*Showing 25 items. More results are available.*\n\n*Next cursor: `3`*"
    )


def test_format_heading_clamps_level():
    assert format_heading("Title") == "# Title"
    assert format_heading("Deep", 9) == "###### Deep"
    assert format_heading("Shallow", 0) == "# Shallow"


def test_format_bullet_list():
    result = format_bullet_list(
        {
            "name": "repo",
            "private": True,
            "archived": False,
            "missing": None,
            "url": "https://bitbucket.org/acme/repo",
            "created": "2024-01-02T03:04:05+00:00",
            "size": 12,
        },
        key_formatter=str.title,
    )
    assert result.split("\n") == [
        "- **Name**: repo",
        "- **Private**: Yes",
        "- **Archived**: No",
        "- **Url**: [https://bitbucket.org/acme/repo](https://bitbucket.org/acme/repo)",
        "- **Created**: 2024-01-02 03:04:05 UTC",
        "- **Size**: 12",
    ]


def test_format_numbered_list():
    assert format_numbered_list([], lambda item, i: item) == "No items."
    assert format_numbered_list(["a", "b"], lambda item, i: f"{i}:{item}") == (
        "0:a\n\n---\n\n1:b"
    )


def test_format_diff_blocks_per_file():
    raw = (
        "diff --git a/a.py b/a.py\n"
        "@@ -1 +1 @@\n"
        "-old\n"
        "+new\n"
        "diff --git a/b.py b/b.py\n"
        "+added"
    )
    result = format_diff(raw)
    assert result == (
        "### a.py\n\n```diff\n@@ -1 +1 @@\n-old\n+new\n```\n\n"
        "### b.py\n\n```diff\n+added\n```"
    )


def test_format_diff_truncates_files_and_lines():
    raw = "\n".join(
        f"diff --git a/f{i}.py b/f{i}.py\n+1\n+2\n+3" for i in range(3)
    )
    result = format_diff(raw, max_files=2, max_lines_per_file=2)
    assert "### f0.py" in result
    assert "### f1.py" in result
    assert "### f2.py" not in result
    assert "// ... more lines omitted for brevity ..." in result
    assert "*Output truncated. Only showing the first 2 files.*" in result


def test_format_diff_empty():
    assert format_diff("  ") == "*No changes found in this pull request.*"


def test_optimize_bitbucket_markdown():
    markdown = "Title  \r\n\r\n\r\n\r\nBody\n```\ncode  \n\n\nblock\n```\n\n"
    assert optimize_bitbucket_markdown(markdown) == (
        "Title\n\nBody\n```\ncode  \n\n\nblock\n```"
    )
    assert optimize_bitbucket_markdown(None) == ""


def test_information_footer():
    assert information_footer(NOW) == [
        "\n\n---",
        "*Information retrieved at: 2024-06-01 12:00:00 UTC*",
    ]


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("abcdefghij", 4) == "abcd..."
