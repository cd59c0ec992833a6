"""
GitHub REST Client
==================

Thin async wrapper around the GitHub REST API.

Every call is single-shot: no retries, no caching. Non-2xx answers raise
GitHubAPIException carrying the upstream status and message.
"""

from typing import Any, Dict, List, Optional

import httpx

from ticketbuddy.config import settings
from ticketbuddy.core import GitHubAPIException
from ticketbuddy.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)

PER_PAGE = 100


class GitHubClient:
    """
    Authenticated GitHub REST client.

    Usage:
        async with GitHubClient() as github:
            repo = await github.get_repo("octocat", "hello-world")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0
    ):
        self._token = token if token is not None else settings.github_token
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.github_api_version,
            "User-Agent": settings.github_user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._http_client = httpx.AsyncClient(
            base_url=(base_url or settings.github_api_url).rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport
        )

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close HTTP client."""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        with log_latency(logger, "github_request", method=method, path=path):
            try:
                response = await self._http_client.request(method, path, params=params, json=json)
            except httpx.HTTPError as e:
                raise GitHubAPIException(502, f"request failed: {e}")

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        message = _error_message(response)
        logger.warning(
            "GitHub API error",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "error": message
            }
        )
        raise GitHubAPIException(response.status_code, message)

    # ========== Repositories & user ==========

    async def get_repo(self, owner: str, name: str) -> Dict[str, Any]:
        return await self._request("GET", f"/repos/{owner}/{name}")

    async def get_user(self) -> Dict[str, Any]:
        return await self._request("GET", "/user")

    # ========== Pull requests ==========

    async def list_pulls(self, owner: str, name: str, state: str = "open") -> List[Dict[str, Any]]:
        params = {"state": state, "per_page": PER_PAGE}
        return await self._request("GET", f"/repos/{owner}/{name}/pulls", params=params) or []

    async def merge_pull(
        self,
        owner: str,
        name: str,
        number: int,
        merge_method: str = "merge",
        sha: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"merge_method": merge_method}
        if sha:
            body["sha"] = sha
        return await self._request("PUT", f"/repos/{owner}/{name}/pulls/{number}/merge", json=body)

    # ========== Issues ==========

    async def list_issues(
        self,
        owner: str,
        name: str,
        state: str = "open",
        labels: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Issues as returned upstream; pull requests are still included."""
        params: Dict[str, Any] = {"state": state, "per_page": PER_PAGE}
        if labels:
            params["labels"] = labels
        return await self._request("GET", f"/repos/{owner}/{name}/issues", params=params) or []

    async def create_issue(
        self,
        owner: str,
        name: str,
        title: str,
        body: Optional[str] = None,
        labels: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"title": title}
        if body is not None:
            payload["body"] = body
        if labels:
            payload["labels"] = labels
        return await self._request("POST", f"/repos/{owner}/{name}/issues", json=payload)

    async def update_issue(self, owner: str, name: str, number: int, **fields: Any) -> Dict[str, Any]:
        return await self._request("PATCH", f"/repos/{owner}/{name}/issues/{number}", json=fields)

    async def create_comment(self, owner: str, name: str, number: int, body: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{name}/issues/{number}/comments",
            json={"body": body}
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase
