import pytest

from ticketbuddy.core import MergeRejectedException
from ticketbuddy.github.domain import HEAD_MODIFIED_MESSAGE, parse_repo_ref, translate_merge_failure

from tests.fakes import github_issue, github_pull


def link(client, **body):
    response = client.post("/github/link", json=body)
    assert response.status_code == 200, response.text
    return response.json()["repo"]


# ========== Repository references ==========

@pytest.mark.parametrize("value", [
    "o/n",
    "https://github.com/o/n",
    "https://github.com/o/n/",
    "https://github.com/o/n.git",
    "github.com/o/n",
    "git@github.com:o/n.git",
])
def test_parse_repo_ref_accepts_common_forms(value):
    ref = parse_repo_ref(value)

    assert ref.full_name == "o/n"
    assert ref.html_url == "https://github.com/o/n"


@pytest.mark.parametrize("value", ["", "o", "o/n/extra", "https://gitlab.com/o/n", "o n/x"])
def test_parse_repo_ref_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_repo_ref(value)


def test_merge_refusals_are_translated():
    assert translate_merge_failure(405, "Required status check \"ci\" is expected.").reason == \
        "Required status checks have not passed"
    assert "review" in translate_merge_failure(405, "At least 1 approving review is required").reason
    assert translate_merge_failure(405, "Pull Request is not mergeable").reason == \
        "Pull request has conflicts and is not mergeable"

    modified = translate_merge_failure(409, "Head branch was modified. Review and try the merge again.")
    assert isinstance(modified, MergeRejectedException)
    assert modified.status_code == 409
    assert modified.reason == HEAD_MODIFIED_MESSAGE

    assert translate_merge_failure(404, "Not Found") is None


# ========== Link & summary ==========

def test_summary_when_unlinked(client, github):
    data = client.get("/github/summary").json()

    assert data["connected"] is False
    assert data["repo"] is None


def test_linking_replaces_previous_link(client, github):
    link(client, repo="o/a")
    repo = link(client, url="https://github.com/o/b.git")

    assert repo["id"] == "o/b"
    assert repo["url"] == "https://github.com/o/b"
    assert repo["default_branch"] == "main"

    summary = client.get("/github/summary").json()
    assert summary["connected"] is True
    assert summary["repo"]["id"] == "o/b"


def test_link_requires_a_reference(client, github):
    response = client.post("/github/link", json={})

    assert response.status_code == 400
    assert "repo, url or repo_url is required" in response.json()["error"]


def test_link_rejects_invalid_and_unknown_repositories(client, github):
    assert client.post("/github/link", json={"repo_url": "not a repo"}).status_code == 400

    response = client.post("/github/link", json={"repo": "o/missing"})
    assert response.status_code == 404
    assert client.get("/github/summary").json()["connected"] is False


def test_unlink(client, github):
    link(client, repo="o/n")

    assert client.delete("/github/link").json() == {"success": True}
    assert client.get("/github/summary").json()["connected"] is False


def test_summary_counts_live_and_falls_back_to_mirrors(client, github):
    github.pulls = [github_pull(7, "Add login rate limit"), github_pull(8, "Fix footer")]
    github.issues = [github_issue(1, "Crash on save"), {**github_issue(8, "Fix footer"), "pull_request": {}}]
    link(client, repo="o/n")

    counts = client.get("/github/summary").json()["counts"]
    assert counts == {"openPRs": 2, "openIssues": 1}

    client.get("/github/o/n/prs")
    github.fail_lists = True
    counts = client.get("/github/summary").json()["counts"]
    assert counts == {"openPRs": 2, "openIssues": 0}


def test_connection_test_reports_login(client, github):
    assert client.get("/github/test").json() == {"ok": True, "login": "octocat"}


def test_connection_test_without_token_is_unavailable(client):
    response = client.get("/github/test")

    assert response.status_code == 503
    assert "GITHUB_TOKEN" in response.json()["error"]


# ========== Listings ==========

def test_list_pull_requests(client, github):
    prs = client.get("/github/o/n/prs", params={"state": "all"}).json()["prs"]

    assert prs[0]["id"] == 7
    assert prs[0]["author"] == "hubot"
    assert prs[0]["head_sha"] == "sha7"
    assert github.requests_to("GET", "/repos/o/n/pulls")


def test_invalid_list_state_and_repo_are_rejected(client, github):
    assert client.get("/github/o/n/prs", params={"state": "merged"}).status_code == 400
    assert client.get("/github/o/bad%20name/prs").status_code == 400


def test_issue_listing_drops_pull_requests_and_opens_tickets(client, github):
    github.issues = [
        github_issue(1, "Crash on save", body="Stack trace attached"),
        github_issue(2, "Typo in footer"),
        {**github_issue(7, "Add login rate limit"), "pull_request": {"url": "x"}},
    ]

    issues = client.get("/github/o/n/issues").json()["issues"]
    assert [i["id"] for i in issues] == [1, 2]

    tickets = client.get("/tickets").json()["tickets"]
    by_issue = {t["github_issue_number"]: t for t in tickets}
    assert set(by_issue) == {1, 2}
    assert by_issue[1]["name"] == "Crash on save"
    assert by_issue[1]["description"] == "Stack trace attached"
    assert by_issue[2]["description"] == "Typo in footer"
    assert by_issue[1]["importance"] == 2
    assert by_issue[1]["github_repo_url"] == "https://github.com/o/n"

    # Listing again does not duplicate tickets
    client.get("/github/o/n/issues")
    assert len(client.get("/tickets").json()["tickets"]) == 2


def test_closed_issue_listing_opens_no_tickets(client, github):
    github.issues = [github_issue(3, "Old bug", state="closed")]

    client.get("/github/o/n/issues", params={"state": "closed"})

    assert client.get("/tickets").json()["tickets"] == []


def test_issue_labels_are_forwarded(client, github):
    client.get("/github/o/n/issues", params={"labels": "bug,ui", "state": "closed"})

    params = github.requests_to("GET", "/repos/o/n/issues")[0][3]
    assert params["labels"] == "bug,ui"
    assert params["state"] == "closed"


# ========== Merge ==========

def test_merge_resolves_ticket(client, github):
    ticket = client.post("/tickets", json={"name": "Rate limit login", "description": "Add rate limiting"}).json()["tickets"][0]

    response = client.post("/github/o/n/pr/7/merge", json={"merge_method": "squash", "ticket_id": ticket["id"]})

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["merged"] is True
    assert data["sha"] == "merged-sha"
    assert data["ticketResolved"] is True
    assert github.requests_to("PUT", "/pulls/7/merge")[0][2] == {"merge_method": "squash"}

    stored = client.get(f"/tickets/{ticket['id']}").json()
    assert stored["status"] == "resolved"
    assert stored["github_pr_number"] == 7
    assert stored["github_repo_url"] == "https://github.com/o/n"


def test_merge_defaults_to_merge_method_without_body(client, github):
    response = client.post("/github/o/n/pr/7/merge")

    assert response.status_code == 200
    assert response.json()["ticketResolved"] is None
    assert github.requests_to("PUT", "/pulls/7/merge")[0][2] == {"merge_method": "merge"}


def test_merge_with_unknown_ticket_still_succeeds(client, github):
    response = client.post("/github/o/n/pr/7/merge", json={"ticket_id": "TICKET-000000-000000"})

    assert response.status_code == 200
    assert response.json()["merged"] is True
    assert response.json()["ticketResolved"] is False


def test_merge_rejected_by_head_change_leaves_mirror_open(client, github):
    link(client, repo="o/n")
    client.get("/github/o/n/prs")
    github.merge_status = 409
    github.merge_body = {"message": "Head branch was modified. Review and try the merge again."}

    response = client.post("/github/o/n/pr/7/merge", json={"sha": "stale"})

    assert response.status_code == 409
    assert "modified" in response.json()["error"]

    github.fail_lists = True
    assert client.get("/github/summary").json()["counts"]["openPRs"] == 1


def test_successful_merge_closes_mirror(client, github):
    link(client, repo="o/n")
    client.get("/github/o/n/prs")

    client.post("/github/o/n/pr/7/merge")

    github.fail_lists = True
    assert client.get("/github/summary").json()["counts"]["openPRs"] == 0


def test_merge_refused_for_failing_checks(client, github):
    github.merge_status = 405
    github.merge_body = {"message": "Required status check \"ci\" is expected."}

    response = client.post("/github/o/n/pr/7/merge")

    assert response.status_code == 405
    assert response.json() == {"error": "Required status checks have not passed"}


def test_merge_reported_unmerged_is_a_conflict(client, github):
    github.merge_body = {"merged": False, "message": "Merge already in progress"}

    response = client.post("/github/o/n/pr/7/merge")

    assert response.status_code == 409
    assert response.json()["error"] == "Merge already in progress"


def test_merge_rejects_unknown_method(client, github):
    assert client.post("/github/o/n/pr/7/merge", json={"method": "octopus"}).status_code == 400
    assert github.requests_to("PUT", "/pulls/7/merge") == []


# ========== Issue writes ==========

def test_create_issue(client, github):
    response = client.post("/github/o/n/issues", json={"title": "Crash on save", "body": "Steps inside"})

    assert response.status_code == 200
    issue = response.json()["issue"]
    assert issue["number"] == 100
    assert issue["title"] == "Crash on save"
    assert github.requests_to("POST", "/repos/o/n/issues")[0][2] == {"title": "Crash on save", "body": "Steps inside"}


def test_create_issue_requires_title(client, github):
    assert client.post("/github/o/n/issues", json={"title": "  "}).status_code == 400
    assert github.requests_to("POST", "/repos/o/n/issues") == []


def test_close_issue(client, github):
    response = client.patch("/github/o/n/issues/12", json={"state": "closed"})

    assert response.status_code == 200
    assert response.json()["issue"]["state"] == "closed"
    assert github.requests_to("PATCH", "/issues/12")[0][2] == {"state": "closed"}


def test_issue_update_validation(client, github):
    assert client.patch("/github/o/n/issues/12", json={}).status_code == 400
    assert client.patch("/github/o/n/issues/12", json={"state": "archived"}).status_code == 400
    assert client.patch("/github/o/n/issues/12", json={"state": None}).status_code == 400
    assert client.patch("/github/o/n/issues/12", json={"title": None}).status_code == 400
    assert github.requests_to("PATCH", "/issues/12") == []


def test_comment_on_issue(client, github):
    response = client.post("/github/o/n/issues/12/comment", json={"body": "Looking into it"})

    assert response.status_code == 200
    comment = response.json()["comment"]
    assert comment["id"] == 555
    assert comment["author"] == "octocat"
    assert comment["body"] == "Looking into it"


def test_empty_comment_is_rejected(client, github):
    assert client.post("/github/o/n/issues/12/comment", json={"body": ""}).status_code == 400
    assert github.requests_to("POST", "/comments") == []
