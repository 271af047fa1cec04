"""Markdown rendering for Bitbucket workspaces."""

from ..models import BitbucketWorkspace, BitbucketWorkspaceMembership
from ..utils.formatting import (
    format_bullet_list,
    format_date,
    format_heading,
    format_numbered_list,
    format_url,
    information_footer,
)


def format_workspaces_list(memberships: list[BitbucketWorkspaceMembership]) -> str:
    if not memberships:
        return "No Bitbucket workspaces found."

    lines = [format_heading("Bitbucket Workspaces", 1), ""]

    def render(membership: BitbucketWorkspaceMembership, index: int) -> str:
        workspace = membership.workspace
        properties = {
            "UUID": workspace.uuid or None,
            "Slug": workspace.slug or None,
            "Permission Level": membership.permission,
            "Last Accessed": format_date(membership.last_accessed),
            "Added": format_date(membership.added_on),
            "URL": (
                format_url(workspace.url, workspace.slug) if workspace.url else None
            ),
        }
        return "\n".join(
            [
                format_heading(f"{index + 1}. {workspace.name}", 2),
                format_bullet_list(properties),
            ]
        )

    lines.append(format_numbered_list(memberships, render))
    lines.extend(information_footer())
    return "\n".join(lines)


def format_workspace_details(workspace: BitbucketWorkspace) -> str:
    lines = [
        format_heading(f"Workspace: {workspace.name}", 1),
        "",
        format_heading("Basic Information", 2),
        format_bullet_list(
            {
                "UUID": workspace.uuid or None,
                "Slug": workspace.slug or None,
                "Private": workspace.is_private,
                "Created": format_date(workspace.created_on),
            }
        ),
    ]
    if workspace.url:
        lines.extend(
            [
                "",
                format_heading("Links", 2),
                f"- {format_url(workspace.url, 'View in Browser')}",
            ]
        )
    lines.extend(information_footer())
    return "\n".join(lines)
