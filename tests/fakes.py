"""In-process fakes for the language model and the GitHub REST API."""

import json
import re
from typing import Any, Dict, List, Optional

import httpx

from ticketbuddy.infrastructure.llm import ChatCompletionResult, ILLMClient

GITHUB_TEST_URL = "https://api.github.test"


class FakeLLM(ILLMClient):
    """Answers every call with a fixed reply, or raises the configured error."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def chat_completion(
        self,
        messages: List[dict],
        temperature: float = 0.3,
        max_tokens: int = 1000,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        self.calls.append({"messages": messages, "operation": operation})
        if self.error is not None:
            raise self.error
        return ChatCompletionResult(
            content=self.reply,
            model="fake-model",
            prompt_tokens=10,
            completion_tokens=5,
            latency_ms=1
        )


def github_issue(number: int, title: str, state: str = "open", body: Optional[str] = None) -> Dict[str, Any]:
    return {
        "number": number,
        "title": title,
        "body": body,
        "state": state,
        "user": {"login": "octocat"},
        "html_url": f"https://github.com/o/n/issues/{number}",
        "created_at": "2026-10-01T12:00:00Z",
        "updated_at": "2026-10-02T12:00:00Z",
    }


def github_pull(number: int, title: str, state: str = "open") -> Dict[str, Any]:
    return {
        "number": number,
        "title": title,
        "state": state,
        "merged_at": None,
        "user": {"login": "hubot"},
        "head": {"sha": f"sha{number}"},
        "html_url": f"https://github.com/o/n/pull/{number}",
        "created_at": "2026-10-01T12:00:00Z",
        "updated_at": "2026-10-02T12:00:00Z",
    }


class FakeGitHub:
    """
    In-process stand-in for the GitHub REST API, served through httpx.MockTransport.

    Every request is recorded in ``requests`` as (method, path, json body, query params).
    """

    def __init__(self):
        self.repos = {"o/n", "o/a", "o/b"}
        self.pulls: List[Dict[str, Any]] = [github_pull(7, "Add login rate limit")]
        self.issues: List[Dict[str, Any]] = []
        self.merge_status = 200
        self.merge_body: Dict[str, Any] = {"sha": "merged-sha", "merged": True, "message": "Pull Request successfully merged"}
        self.fail_lists = False
        self.requests: List[tuple] = []
        self._routes: List[tuple] = [
            ("GET", re.compile(r"^/user$"), self._user),
            ("GET", re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<name>[^/]+)$"), self._repo),
            ("GET", re.compile(r"^/repos/[^/]+/[^/]+/pulls$"), self._list_pulls),
            ("PUT", re.compile(r"^/repos/[^/]+/[^/]+/pulls/(?P<number>\d+)/merge$"), self._merge),
            ("GET", re.compile(r"^/repos/[^/]+/[^/]+/issues$"), self._list_issues),
            ("POST", re.compile(r"^/repos/[^/]+/[^/]+/issues$"), self._create_issue),
            ("PATCH", re.compile(r"^/repos/[^/]+/[^/]+/issues/(?P<number>\d+)$"), self._update_issue),
            ("POST", re.compile(r"^/repos/[^/]+/[^/]+/issues/(?P<number>\d+)/comments$"), self._comment),
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body, dict(request.url.params)))

        for method, pattern, handler in self._routes:
            match = pattern.match(request.url.path)
            if method == request.method and match:
                return handler(request, body, **match.groupdict())
        return httpx.Response(404, json={"message": "Not Found"})

    def requests_to(self, method: str, suffix: str) -> List[tuple]:
        return [r for r in self.requests if r[0] == method and r[1].endswith(suffix)]

    def _user(self, request, body):
        return httpx.Response(200, json={"login": "octocat"})

    def _repo(self, request, body, owner, name):
        full_name = f"{owner}/{name}"
        if full_name not in self.repos:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json={
            "full_name": full_name,
            "html_url": f"https://github.com/{full_name}",
            "default_branch": "main",
        })

    def _list_pulls(self, request, body):
        if self.fail_lists:
            return httpx.Response(503, json={"message": "Service Unavailable"})
        return httpx.Response(200, json=self.pulls)

    def _merge(self, request, body, number):
        return httpx.Response(self.merge_status, json=self.merge_body)

    def _list_issues(self, request, body):
        if self.fail_lists:
            return httpx.Response(503, json={"message": "Service Unavailable"})
        return httpx.Response(200, json=self.issues)

    def _create_issue(self, request, body):
        issue = github_issue(100, body["title"], body=body.get("body"))
        return httpx.Response(201, json=issue)

    def _update_issue(self, request, body, number):
        issue = github_issue(int(number), body.get("title") or "Existing issue", state=body.get("state") or "open")
        return httpx.Response(200, json=issue)

    def _comment(self, request, body, number):
        return httpx.Response(201, json={
            "id": 555,
            "body": body["body"],
            "user": {"login": "octocat"},
            "html_url": f"https://github.com/o/n/issues/{number}#issuecomment-555",
            "created_at": "2026-10-03T12:00:00Z",
        })


