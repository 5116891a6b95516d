from __future__ import annotations

from collections.abc import Sequence

from bumpr.services.release.model import PullRequestSummary

NOTES_HEADING = "# Change log"
EMPTY_NOTES_PLACEHOLDER = (
    "- No pull requests found since the last release; "
    "please update this change log manually."
)


def format_entry(pr: PullRequestSummary) -> str:
    return f"- {pr.title}: {pr.url}"


def compose_notes(prs: Sequence[PullRequestSummary]) -> str:
    lines = [NOTES_HEADING]
    if prs:
        lines.extend(format_entry(pr) for pr in prs)
    else:
        lines.append(EMPTY_NOTES_PLACEHOLDER)
    return "\n".join(lines)
