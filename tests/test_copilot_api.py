from ticketbuddy.core import LLMException

from tests.fakes import FakeLLM


def test_copilot_without_model_is_unavailable(client):
    response = client.post("/copilot", json={"messages": [{"role": "user", "content": "Hi"}]})

    assert response.status_code == 503
    assert "no language model" in response.json()["error"]


def test_copilot_replies_with_dashboard_context(client, use_llm):
    llm = use_llm(FakeLLM("You have 4 open tickets."))

    response = client.post("/copilot", json={
        "messages": [
            {"role": "user", "content": "How many tickets?"},
            {"role": "assistant", "content": "Let me check."},
            {"role": "user", "content": "Well?"},
        ],
        "context": {"page": "tickets", "ticketsCount": 4, "githubConnected": False},
    })

    assert response.status_code == 200
    assert response.json() == {"response": "You have 4 open tickets."}

    call = llm.calls[0]
    assert call["operation"] == "copilot"
    assert call["messages"][0]["role"] == "system"
    assert "There are 4 tickets." in call["messages"][0]["content"]
    assert "No GitHub repository is linked." in call["messages"][0]["content"]
    assert call["messages"][-1] == {"role": "user", "content": "Well?"}


def test_copilot_model_failure_is_bad_gateway(client, use_llm):
    use_llm(FakeLLM(error=LLMException("rate limited")))

    response = client.post("/copilot", json={"messages": [{"role": "user", "content": "Hi"}]})

    assert response.status_code == 502
    assert "rate limited" in response.json()["error"]


def test_copilot_validates_transcript(client, use_llm):
    use_llm(FakeLLM("unused"))

    assert client.post("/copilot", json={"messages": []}).status_code == 400
    assert client.post("/copilot", json={"messages": [{"role": "system", "content": "x"}]}).status_code == 400
