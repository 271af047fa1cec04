"""Markdown rendering for workspace code search results."""

import posixpath

from ..models import BitbucketCodeSearchLine, BitbucketCodeSearchResult
from ..utils.formatting import format_heading, format_url, information_footer

LANGUAGE_HINTS = {
    ".js": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".py": "python",
    ".java": "java",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".cpp": "cpp",
    ".h": "c",
    ".hpp": "cpp",
    ".tf": "terraform",
    ".hcl": "hcl",
    ".sh": "bash",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".md": "markdown",
    ".sql": "sql",
}


def language_hint(path: str) -> str:
    """Guess a fenced code block language from a file name."""
    name = posixpath.basename(path).lower()
    if name == "dockerfile":
        return "dockerfile"
    return LANGUAGE_HINTS.get(posixpath.splitext(name)[1], "")


def _render_line(line: BitbucketCodeSearchLine) -> str:
    text = "".join(f"`{part}`" if match else part for part, match in line.segments)
    return f"{line.line}: {text}"


def _format_code_search_result(result: BitbucketCodeSearchResult) -> list[str]:
    link = format_url(result.url, result.path) if result.url else result.path
    noun = "match" if result.match_count == 1 else "matches"
    lines = [
        format_heading(link, 3),
        "",
        f"{result.match_count} {noun} found",
        "",
        f"```{language_hint(result.path)}",
    ]
    for content_match in result.matches:
        lines.extend(_render_line(line) for line in content_match)
        if len(content_match) > 1:
            lines.append("")
    lines.extend(["```", ""])
    return lines


def format_code_search_results(
    results: list[BitbucketCodeSearchResult], total: int | None = None
) -> str:
    if not results:
        return "\n".join(["**No code matches found.**", *information_footer()])

    lines = [
        format_heading("Code Search Results", 2),
        "",
        f"Found {total if total is not None else len(results)} matches "
        "for the code search query.",
        "",
    ]
    for result in results:
        lines.extend(_format_code_search_result(result))
    lines.extend(information_footer())
    return "\n".join(lines)
