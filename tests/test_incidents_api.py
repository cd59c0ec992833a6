import pytest

from ticketbuddy.config import settings
from ticketbuddy.core import LLMException
from ticketbuddy.incidents.application import parse_limit, parse_since
from ticketbuddy.incidents.domain import DEFAULT_CHECKOUT_LOGS, load_log_sample

from tests.fakes import FakeLLM

CHECKOUT_SUMMARY = "Checkout failing for ~30% of card payments after deploy a12f9c."


def run_diagnostic(client, **args):
    response = client.post("/mcp/call-tool", json={"tool": "summarize_checkout_health", "args": args})
    assert response.status_code == 200, response.text
    return response.json()


def test_checkout_diagnostic_files_incident(client):
    data = run_diagnostic(client)

    assert data["incidentFiled"] is True
    assert data["ticketId"].startswith("INC-")
    assert data["severity"] == "high"
    assert data["summary"] == CHECKOUT_SUMMARY
    assert data["recommendedFix"] == "Rollback payment_handler.js or add null guard around billing_address."
    assert "Pay button is disabled" in data["uiObservation"]

    incidents = client.get("/incidents").json()["incidents"]
    assert len(incidents) == 1
    assert incidents[0]["ticketId"] == data["ticketId"]
    assert incidents[0]["service"] == "checkout"
    assert incidents[0]["recommendedFix"] == data["recommendedFix"]


def test_model_reply_does_not_change_filed_values(client, use_llm):
    llm = use_llm(FakeLLM('{"summary": "All good", "severity": "low", "recommendedFix": "Nothing"}'))

    data = run_diagnostic(client)

    assert data["severity"] == "high"
    assert data["summary"] == CHECKOUT_SUMMARY
    assert llm.calls[0]["operation"] == "diagnostic"
    assert "billing_address" in llm.calls[0]["messages"][0]["content"]


def test_model_failure_still_files_incident(client, use_llm):
    use_llm(FakeLLM(error=LLMException("gateway down")))

    data = run_diagnostic(client)

    assert data["incidentFiled"] is True
    assert len(client.get("/incidents").json()["incidents"]) == 1


def test_unknown_tool_is_rejected(client):
    response = client.post("/mcp/call-tool", json={"tool": "restart_everything", "args": {}})

    assert response.status_code == 400
    assert response.json() == {"error": "Unknown tool"}
    assert client.get("/incidents").json()["incidents"] == []


def test_missing_tool_name_is_rejected(client):
    assert client.post("/mcp/call-tool", json={"args": {}}).status_code == 400


def test_incident_filters(client):
    first = run_diagnostic(client)
    second = run_diagnostic(client, service="payments")

    newest_first = client.get("/incidents").json()["incidents"]
    assert [i["ticketId"] for i in newest_first] == [second["ticketId"], first["ticketId"]]

    payments = client.get("/incidents", params={"service": "payments"}).json()["incidents"]
    assert [i["ticketId"] for i in payments] == [second["ticketId"]]

    assert len(client.get("/incidents", params={"limit": "1"}).json()["incidents"]) == 1
    assert len(client.get("/incidents", params={"limit": "abc"}).json()["incidents"]) == 2
    assert len(client.get("/incidents", params={"limit": "-3"}).json()["incidents"]) == 2

    assert client.get("/incidents", params={"since": "2999-01-01T00:00:00Z"}).json()["incidents"] == []
    assert len(client.get("/incidents", params={"since": "2000-01-01T00:00:00Z"}).json()["incidents"]) == 2
    assert len(client.get("/incidents", params={"since": "yesterday"}).json()["incidents"]) == 2


@pytest.mark.parametrize("raw, expected", [
    (None, 50),
    ("10", 10),
    ("500", 200),
    ("0", 50),
    ("ten", 50),
])
def test_parse_limit(raw, expected):
    assert parse_limit(raw) == expected


def test_parse_since_normalises_to_utc():
    parsed = parse_since("2026-10-19T12:00:00+02:00")

    assert parsed.hour == 10
    assert parsed.utcoffset().total_seconds() == 0
    assert parse_since("2026-10-19T10:00:00").tzinfo is not None
    assert parse_since("not a date") is None


def test_log_sample_is_read_from_yaml_file(tmp_path, monkeypatch):
    path = tmp_path / "checkout.yaml"
    path.write_text("service: checkout\nerrors:\n  - msg: Card declined spike\n    count: 12\n")

    assert load_log_sample(path)["errors"][0]["msg"] == "Card declined spike"
    assert load_log_sample(tmp_path / "absent.yaml") == DEFAULT_CHECKOUT_LOGS


def test_diagnostic_prompt_uses_configured_log_file(client, use_llm, tmp_path, monkeypatch):
    path = tmp_path / "checkout.yaml"
    path.write_text("service: checkout\nerrors:\n  - msg: Card declined spike\n    count: 12\n")
    monkeypatch.setattr(settings, "checkout_logs_path", path)
    llm = use_llm(FakeLLM("{}"))

    run_diagnostic(client)

    assert "Card declined spike" in llm.calls[0]["messages"][0]["content"]
