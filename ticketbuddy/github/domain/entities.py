"""
GitHub Domain Entities
======================

Pure Python domain logic for the GitHub bridge.

Everything here is free of HTTP and database concerns:
- repository reference parsing
- the payload-to-mirror transformation shared by webhooks and polling
- event summaries for the local event log
- webhook signature verification
- translation of merge refusals
"""

import hashlib
import hmac
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from ticketbuddy.core import MergeRejectedException

_NAME = r"[A-Za-z0-9_.-]+"
_SHORT_REF = re.compile(rf"^(?P<owner>{_NAME})/(?P<name>{_NAME})$")
_URL_REF = re.compile(
    rf"^(?:https?://)?(?:www\.)?github\.com[/:](?P<owner>{_NAME})/(?P<name>{_NAME})/?$",
    re.IGNORECASE
)
_GIT_SSH_REF = re.compile(rf"^git@github\.com:(?P<owner>{_NAME})/(?P<name>{_NAME})$", re.IGNORECASE)


@dataclass(frozen=True)
class RepoRef:
    """An ``owner/name`` pair."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.full_name}"


def parse_repo_ref(value: str) -> RepoRef:
    """
    Normalise ``owner/name`` or a github.com URL into a RepoRef.

    Accepts ``https://github.com/owner/name``, with or without a trailing
    slash or ``.git`` suffix, and the ssh form ``git@github.com:owner/name.git``.

    Raises:
        ValueError: value is not a recognisable repository reference
    """
    text = (value or "").strip()
    if text.endswith(".git"):
        text = text[:-4]

    for pattern in (_URL_REF, _GIT_SSH_REF, _SHORT_REF):
        match = pattern.match(text)
        if match:
            return RepoRef(match.group("owner"), match.group("name"))

    raise ValueError(f"not a GitHub repository reference: {value!r}")


# ========== Mirror transformation ==========

def parse_github_time(value: Optional[str]) -> Optional[datetime]:
    """GitHub timestamps look like ``2024-05-01T12:00:00Z``."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _login(entity: Optional[Dict[str, Any]]) -> Optional[str]:
    return ((entity or {}).get("user") or {}).get("login")


def pull_request_fields(pr: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mirror columns for a pull request object.

    The same transformation is applied to REST list items and to the
    ``pull_request`` object of a webhook payload.
    """
    return {
        "number": pr["number"],
        "title": pr.get("title") or "",
        "author": _login(pr),
        "state": pr.get("state") or "open",
        "merged": bool(pr.get("merged") or pr.get("merged_at")),
        "head_sha": (pr.get("head") or {}).get("sha"),
        "html_url": pr.get("html_url"),
        "created_at": parse_github_time(pr.get("created_at")),
        "updated_at": parse_github_time(pr.get("updated_at")),
    }


def issue_fields(issue: Dict[str, Any]) -> Dict[str, Any]:
    """Mirror columns for an issue object (REST or webhook)."""
    return {
        "number": issue["number"],
        "title": issue.get("title") or "",
        "body": issue.get("body"),
        "author": _login(issue),
        "state": issue.get("state") or "open",
        "html_url": issue.get("html_url"),
        "created_at": parse_github_time(issue.get("created_at")),
        "updated_at": parse_github_time(issue.get("updated_at")),
    }


def is_pull_request(issue: Dict[str, Any]) -> bool:
    """The issues API also returns pull requests; they carry a ``pull_request`` key."""
    return "pull_request" in issue


# ========== Event log ==========

def summarize_event(event_type: str, payload: Dict[str, Any]) -> Tuple[Optional[str], str]:
    """One-line summary of a webhook delivery, with its action."""
    action = payload.get("action")

    if event_type == "pull_request" and payload.get("pull_request"):
        pr = payload["pull_request"]
        verb = "merged" if action == "closed" and pr.get("merged") else action
        return action, f"PR #{pr.get('number')} {verb}: {pr.get('title', '')}"

    if event_type == "issues" and payload.get("issue"):
        issue = payload["issue"]
        return action, f"Issue #{issue.get('number')} {action}: {issue.get('title', '')}"

    if event_type == "issue_comment" and payload.get("issue"):
        author = ((payload.get("comment") or {}).get("user") or {}).get("login", "someone")
        return action, f"Comment on #{payload['issue'].get('number')} by {author}"

    if event_type == "push":
        ref = payload.get("ref", "")
        commits = payload.get("commits") or []
        return action, f"Push to {ref}: {len(commits)} commit(s)"

    if event_type == "ping":
        return action, f"Webhook ping: {payload.get('zen', '')}".strip()

    return action, " ".join(part for part in (event_type, action) if part)


# ========== Webhook signature ==========

def compute_signature(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(secret: Optional[str], body: bytes, signature: str) -> bool:
    """Constant-time comparison of ``X-Hub-Signature-256`` against the raw body."""
    if not secret or not signature:
        return False
    expected = compute_signature(secret, body).encode("utf-8")
    return hmac.compare_digest(expected, signature.strip().encode("utf-8"))


# ========== Merge refusals ==========

HEAD_MODIFIED_MESSAGE = (
    "Head branch was modified since the reference SHA was captured. "
    "Review the latest changes and try the merge again."
)


def translate_merge_failure(upstream_status: int, message: str) -> Optional[MergeRejectedException]:
    """
    Map a GitHub merge refusal to a readable rejection.

    Returns None for failures that are not merge refusals (those are relayed
    as ordinary upstream errors).
    """
    lowered = (message or "").lower()

    if upstream_status == 405:
        if "status check" in lowered:
            reason = "Required status checks have not passed"
        elif "review" in lowered:
            reason = "An approving review is required before merging"
        elif "not mergeable" in lowered:
            reason = "Pull request has conflicts and is not mergeable"
        else:
            reason = f"Pull request cannot be merged: {message}"
        return MergeRejectedException(405, reason, {"upstream_message": message})

    if upstream_status == 409:
        return MergeRejectedException(409, HEAD_MODIFIED_MESSAGE, {"upstream_message": message})

    return None
