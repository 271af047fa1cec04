"""Tests for Bitbucket pull request operations."""

import pytest

PRS_PATH = "/2.0/repositories/acme/backend/pullrequests"

PULL_REQUEST = {
    "id": 7,
    "title": "Add rate limiting",
    "summary": {"raw": "Adds a token bucket to the API gateway."},
    "state": "OPEN",
    "author": {"display_name": "Jane Doe"},
    "reviewers": [{"display_name": "Sam Lee"}],
    "source": {"branch": {"name": "feature/rate-limit"}},
    "destination": {
        "branch": {"name": "main"},
        "repository": {"full_name": "acme/backend"},
    },
    "created_on": "2024-04-01T12:00:00+00:00",
    "updated_on": "2024-04-02T12:00:00+00:00",
    "comment_count": 2,
    "task_count": 1,
    "links": {
        "html": {"href": "https://bitbucket.org/acme/backend/pull-requests/7"},
        "comments": {"href": "https://api.bitbucket.org/2.0/.../comments"},
    },
}

DIFFSTAT = {
    "values": [
        {
            "status": "modified",
            "old": {"path": "gateway/limits.py"},
            "new": {"path": "gateway/limits.py"},
            "lines_added": 10,
            "lines_removed": 2,
        },
        {
            "status": "added",
            "old": None,
            "new": {"path": "gateway/bucket.py"},
            "lines_added": 40,
            "lines_removed": 0,
        },
    ]
}

RAW_DIFF = (
    "diff --git a/gateway/limits.py b/gateway/limits.py\n"
    "--- a/gateway/limits.py\n"
    "+++ b/gateway/limits.py\n"
    "@@ -1,2 +1,3 @@\n"
    "+RATE = 10\n"
)

COMMENTS = {
    "values": [
        {
            "id": 1,
            "content": {"raw": "Why 10?"},
            "user": {"display_name": "Sam Lee"},
            "created_on": "2024-04-01T13:00:00+00:00",
            "inline": {"path": "gateway/limits.py", "to": 1},
            "links": {"code": {"href": "https://bitbucket.org/code/1"}},
        },
        {
            "id": 2,
            "content": {"raw": "Matches the SLA."},
            "user": {"display_name": "Jane Doe"},
            "created_on": "2024-04-01T14:00:00+00:00",
            "parent": {"id": 1},
        },
        {
            "id": 3,
            "content": {"raw": ""},
            "user": {"display_name": "Ghost"},
            "created_on": "2024-04-01T15:00:00+00:00",
            "deleted": True,
        },
    ],
    "page": 1,
}


def test_list_pull_requests(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", PRS_PATH, {"values": [PULL_REQUEST], "page": 1})

    result = fetcher.list_pull_requests("acme", "backend", state="open", limit=5)

    params = fake_bitbucket.last_request.url.params
    assert params["state"] == "OPEN"
    assert params["pagelen"] == "5"
    assert "# Bitbucket Pull Requests" in result
    assert "## #7: Add rate limiting" in result
    assert "- **Source Branch**: feature/rate-limit" in result
    assert "- **Author**: Jane Doe" in result
    assert "[PR #7](https://bitbucket.org/acme/backend/pull-requests/7)" in result
    assert "*Showing 1 item.*" in result


def test_list_pull_requests_cursor_and_query(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", PRS_PATH, {"values": []})

    result = fetcher.list_pull_requests(
        "acme", "backend", query='title ~ "fix"', cursor="4"
    )

    params = fake_bitbucket.last_request.url.params
    assert params["q"] == 'title ~ "fix"'
    assert params["page"] == "4"
    assert "state" not in params
    assert result.startswith("No pull requests found matching your criteria.")


def test_list_pull_requests_invalid_state(fetcher, fake_bitbucket):
    with pytest.raises(ValueError, match="Invalid state 'MERGING'"):
        fetcher.list_pull_requests("acme", "backend", state="merging")
    assert fake_bitbucket.requests == []


def test_get_pull_request_with_diffstat(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", f"{PRS_PATH}/7", PULL_REQUEST)
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/diffstat", DIFFSTAT)

    result = fetcher.get_pull_request("acme", "backend", 7)

    assert result.startswith("# Pull Request #7: Add rate limiting")
    assert "- **Repository**: acme/backend" in result
    assert "- **Destination**: main" in result
    assert "## Reviewers\n- Sam Lee" in result
    assert "Adds a token bucket to the API gateway." in result
    assert "2 files changed with 50 insertions and 2 deletions" in result
    assert "- `gateway/limits.py` (+10, -2)" in result
    assert "- `gateway/bucket.py` (+40)" in result
    assert "## Code Changes" not in result
    assert "## Comments" not in result
    assert [r.url.path for r in fake_bitbucket.requests] == [
        f"{PRS_PATH}/7",
        f"{PRS_PATH}/7/diffstat",
    ]


def test_get_pull_request_diffstat_failure_is_skipped(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", f"{PRS_PATH}/7", PULL_REQUEST)
    fake_bitbucket.add(
        "GET", f"{PRS_PATH}/7/diffstat", {"message": "boom"}, status_code=500
    )

    result = fetcher.get_pull_request("acme", "backend", 7)

    assert "# Pull Request #7" in result
    assert "## File Changes" not in result


def test_get_pull_request_with_diff_and_comments(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", f"{PRS_PATH}/7", PULL_REQUEST)
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/diffstat", DIFFSTAT)
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/diff", text=RAW_DIFF)
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/comments", COMMENTS)

    result = fetcher.get_pull_request(
        "acme", "backend", 7, include_full_diff=True, include_comments=True
    )

    assert "## Code Changes (Full Diff)" in result
    assert "### gateway/limits.py" in result
    assert "```diff\n--- a/gateway/limits.py" in result
    assert "+RATE = 10" in result
    assert "### Comment by Sam Lee" in result
    assert "**Inline Comment: File: `gateway/limits.py`** (line 1)" in result
    assert "> **Jane Doe** (2024-04-01 14:00:00 UTC)" in result
    assert "> Matches the SLA." in result
    assert "### [DELETED] Comment by Ghost" in result
    assert "*This comment has been deleted.*" in result

    diff_request = next(
        r for r in fake_bitbucket.requests if r.url.path.endswith("/diff")
    )
    assert diff_request.headers["Accept"] == "text/plain"


def test_get_pull_request_without_comments_shows_notice(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", f"{PRS_PATH}/7", PULL_REQUEST)
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/diffstat", {"values": []})
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/comments", {"values": []})

    result = fetcher.get_pull_request("acme", "backend", 7, include_comments=True)

    assert "*No comments found on this pull request.*" in result


def test_list_pull_request_comments(fetcher, fake_bitbucket):
    fake_bitbucket.add(
        "GET",
        f"{PRS_PATH}/7/comments",
        {**COMMENTS, "next": "https://api.bitbucket.org/2.0/x?page=2"},
    )

    result = fetcher.list_pull_request_comments("acme", "backend", 7, limit=3)

    assert result.startswith("# Comments on Pull Request #7")
    assert "### Comment by Sam Lee" in result
    assert "**Replies:**" in result
    assert "[View code context in browser](https://bitbucket.org/code/1)" in result
    assert "*Showing 3 items. More results are available.*" in result
    assert "*Next cursor: `2`*" in result
    assert fake_bitbucket.last_request.url.params["pagelen"] == "3"


def test_list_pull_request_comments_empty(fetcher, fake_bitbucket):
    fake_bitbucket.add("GET", f"{PRS_PATH}/7/comments", {"values": []})

    result = fetcher.list_pull_request_comments("acme", "backend", 7)

    assert "*No comments found on this pull request.*" in result
    assert result.endswith("*Showing 0 items.*")


def test_get_pull_request_follows_diff_redirects(fetcher, fake_bitbucket):
    target = "/2.0/repositories/acme/backend/{}/abc123..def456"
    fake_bitbucket.add("GET", f"{PRS_PATH}/7", PULL_REQUEST)
    for kind in ("diffstat", "diff"):
        fake_bitbucket.add(
            "GET",
            f"{PRS_PATH}/7/{kind}",
            status_code=302,
            headers={"Location": target.format(kind)},
        )
    fake_bitbucket.add("GET", target.format("diffstat"), DIFFSTAT)
    fake_bitbucket.add("GET", target.format("diff"), text=RAW_DIFF)

    result = fetcher.get_pull_request("acme", "backend", 7, include_full_diff=True)

    assert "2 files changed with 50 insertions and 2 deletions" in result
    assert "## Code Changes (Full Diff)" in result
    assert "+RATE = 10" in result
    diff_request = fake_bitbucket.last_request
    assert diff_request.url.path == target.format("diff")
    assert diff_request.headers["Accept"] == "text/plain"


def test_pull_request_path_slugs_are_quoted(fetcher, fake_bitbucket):
    fake_bitbucket.add(
        "GET", "/2.0/repositories/my team/back/end/pullrequests", {"values": []}
    )

    fetcher.list_pull_requests("my team", "back/end")

    raw_path = fake_bitbucket.last_request.url.raw_path.split(b"?")[0]
    assert raw_path == b"/2.0/repositories/my%20team/back%2Fend/pullrequests"
