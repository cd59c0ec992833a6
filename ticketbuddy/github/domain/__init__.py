"""
GitHub Domain Layer
===================

Pure business logic for the GitHub bridge. No dependencies on HTTP or storage.
"""

from ticketbuddy.github.domain.entities import (
    HEAD_MODIFIED_MESSAGE,
    RepoRef,
    compute_signature,
    is_pull_request,
    issue_fields,
    parse_github_time,
    parse_repo_ref,
    pull_request_fields,
    summarize_event,
    translate_merge_failure,
    verify_signature,
)

__all__ = [
    "HEAD_MODIFIED_MESSAGE",
    "RepoRef",
    "compute_signature",
    "is_pull_request",
    "issue_fields",
    "parse_github_time",
    "parse_repo_ref",
    "pull_request_fields",
    "summarize_event",
    "translate_merge_failure",
    "verify_signature",
]
