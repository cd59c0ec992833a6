import asyncio

import pytest

from ticketbuddy.core import LLMException
from ticketbuddy.core.identifiers import generate_identifier
from ticketbuddy.tickets.application import ClassificationService
from ticketbuddy.tickets.application.services import extract_json_array, parse_model_drafts
from ticketbuddy.tickets.domain import FallbackDrafts, ParsedDrafts, heuristic_drafts
from ticketbuddy.tickets.domain.heuristics import detect_priority, summarize_title

from tests.fakes import FakeLLM


def test_detect_priority_levels():
    assert detect_priority("The site is DOWN, fix asap") == 3
    assert detect_priority("This is blocking the release") == 2
    assert detect_priority("Tweak the footer spacing") == 1


@pytest.mark.parametrize("word", ["urgent", "critical", "emergency", "asap"])
def test_urgency_words_raise_priority_without_domain(word):
    drafts = heuristic_drafts(f"Tweak the footer spacing, {word}")

    assert len(drafts) == 1
    assert drafts[0].assignee is None
    assert drafts[0].priority == 3


@pytest.mark.parametrize("word", ["urgent", "critical", "emergency", "asap"])
def test_urgency_words_raise_low_priority_domain(word):
    drafts = heuristic_drafts(f"Fix the footer layout, {word}")

    assert [(d.assignee, d.priority) for d in drafts] == [("Jordan", 3)]


def test_summarize_title_strips_punctuation_and_truncates():
    assert summarize_title("Users cannot log in, this is urgent!") == "Users cannot log in this is"
    assert summarize_title("?!") == "New request"


def test_urgent_login_request_goes_to_auth_owner():
    drafts = heuristic_drafts("Users cannot log in, this is urgent")

    assert len(drafts) == 1
    assert drafts[0].title == "Authentication: Users cannot log in this is"
    assert drafts[0].priority == 3
    assert drafts[0].assignee == "Alex"


def test_one_draft_per_matching_domain():
    drafts = heuristic_drafts("Reset password flow and add a database migration")

    assert [d.assignee for d in drafts] == ["Alex", "Dana"]
    assert [d.priority for d in drafts] == [3, 2]
    assert drafts[1].title.startswith("Database: ")


def test_urgency_raises_low_base_priority():
    drafts = heuristic_drafts("The checkout button is broken")

    assert len(drafts) == 1
    assert drafts[0].assignee == "Jordan"
    assert drafts[0].priority == 2


def test_unmatched_request_yields_single_unassigned_draft():
    drafts = heuristic_drafts("Update the onboarding copy")

    assert len(drafts) == 1
    assert drafts[0].title == "Update the onboarding copy"
    assert drafts[0].assignee is None
    assert drafts[0].priority == 1


def test_extract_json_array_from_fenced_reply():
    reply = 'Sure! Here you go:\n```json\n[{"title": "A", "priority": 1}]\n```\nAnything else?'
    assert extract_json_array(reply) == '[{"title": "A", "priority": 1}]'
    assert extract_json_array("no array here") is None


def test_parse_model_drafts_fills_missing_description():
    drafts = parse_model_drafts('[{"title": "Fix login", "priority": 3, "assignee": " "}]', "request text")

    assert drafts[0].title == "Fix login"
    assert drafts[0].description == "request text"
    assert drafts[0].assignee is None


@pytest.mark.parametrize("reply", [
    "not json at all",
    "[]",
    "[{\"title\": \"x\"}]",
    "[{\"title\": \"x\", \"priority\": 7}]",
    "[{\"title\": \"x\", \"priority\": \"3\"}]",
    "[{\"title\": \"x\", \"priority\": 1},]",
])
def test_parse_model_drafts_rejects_invalid_replies(reply):
    with pytest.raises(ValueError):
        parse_model_drafts(reply, "text")


def test_classify_without_model_uses_heuristics():
    outcome = asyncio.run(ClassificationService(None).classify("Users cannot log in, this is urgent"))

    assert isinstance(outcome, FallbackDrafts)
    assert outcome.source == "heuristic"
    assert outcome.drafts[0].assignee == "Alex"


def test_classify_uses_valid_model_reply():
    llm = FakeLLM('```json\n[{"title": "Rotate keys", "description": "Rotate API keys", "priority": 3, "assignee": "Sam"}]\n```')

    outcome = asyncio.run(ClassificationService(llm).classify("rotate the keys"))

    assert isinstance(outcome, ParsedDrafts)
    assert outcome.source == "model"
    assert outcome.drafts[0].title == "Rotate keys"
    assert llm.calls[0]["operation"] == "classification"


def test_classify_falls_back_when_model_fails():
    llm = FakeLLM(error=LLMException("boom"))

    outcome = asyncio.run(ClassificationService(llm).classify("Users cannot log in"))

    assert isinstance(outcome, FallbackDrafts)
    assert "boom" in outcome.reason


def test_classify_falls_back_on_schema_violation():
    llm = FakeLLM('[{"title": "x", "priority": "high"}]')

    outcome = asyncio.run(ClassificationService(llm).classify("Users cannot log in"))

    assert isinstance(outcome, FallbackDrafts)
    assert outcome.drafts[0].assignee == "Alex"


def test_identifiers_are_distinct_within_a_millisecond():
    ids = {generate_identifier("TICKET") for _ in range(50)}

    assert len(ids) == 50
    assert all(i.startswith("TICKET-") for i in ids)
