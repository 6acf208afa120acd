import json

import pytest

from backend.errors import SummaryGenerationError, SummaryInProgressError
from backend.schemas.summary import SummaryStatus
from backend.seed.record_seed import seed_records
from backend.services.summarizer import SummaryTracker, build_summary_prompt, request_summary, share_text


class _FakeResponse:
    def __init__(self, text):
        self.text = text


class _FakeLLM:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return _FakeResponse(self.text)


def test_prompt_embeds_structured_records_and_sections():
    prompt = build_summary_prompt(seed_records())
    for section in (
        "Patient Overview",
        "Clinical Timeline",
        "Key Lab Trends",
        "Current Status & Staging",
        "Questions for Next Appointment",
    ):
        assert section in prompt
    records_json = prompt[prompt.index("[") : prompt.rindex("]") + 1]
    assert [item["id"] for item in json.loads(records_json)] == ["1", "2", "3", "4", "5", "6"]


def test_request_summary_returns_text_verbatim(monkeypatch):
    narrative = "  **Patient Overview**\nStable after thyroidectomy.\n"
    fake = _FakeLLM(text=narrative)
    monkeypatch.setattr("backend.services.summarizer.get_llm", lambda model, temperature=0.2: fake)

    assert request_summary(seed_records()) == narrative
    assert "Total Thyroidectomy" in fake.prompts[0]


def test_request_summary_wraps_collaborator_failure(monkeypatch):
    cause = ConnectionError("unreachable")
    monkeypatch.setattr("backend.services.summarizer.get_llm", lambda model, temperature=0.2: _FakeLLM(error=cause))

    with pytest.raises(SummaryGenerationError) as exc_info:
        request_summary(seed_records())
    assert exc_info.value.__cause__ is cause


def test_request_summary_without_api_key(monkeypatch):
    monkeypatch.setattr("backend.services.llm.settings.openai_api_key", None)
    with pytest.raises(SummaryGenerationError, match="OPENAI_API_KEY"):
        request_summary(seed_records())


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_request_summary_rejects_empty_response(monkeypatch, text):
    monkeypatch.setattr("backend.services.summarizer.get_llm", lambda model, temperature=0.2: _FakeLLM(text=text))
    with pytest.raises(SummaryGenerationError):
        request_summary(seed_records())


def test_tracker_success_flow():
    tracker = SummaryTracker(requester=lambda records: "brief")
    assert tracker.state.status == SummaryStatus.IDLE

    pending = tracker.begin()
    assert pending.status == SummaryStatus.PENDING
    assert pending.requested_at is not None

    done = tracker.run(seed_records())
    assert done.status == SummaryStatus.SUCCEEDED
    assert done.text == "brief"
    assert done.completed_at is not None


def test_tracker_is_single_flight():
    tracker = SummaryTracker(requester=lambda records: "brief")
    tracker.begin()
    with pytest.raises(SummaryInProgressError):
        tracker.begin()
    with pytest.raises(SummaryInProgressError):
        tracker.reset()


def test_tracker_failure_replaces_previous_text_and_allows_retry():
    outcomes = iter(["first", SummaryGenerationError("service down")])

    def requester(records):
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    tracker = SummaryTracker(requester=requester)
    tracker.begin()
    tracker.run([])
    tracker.begin()
    failed = tracker.run([])

    assert failed.status == SummaryStatus.FAILED
    assert failed.text is None
    assert failed.error == "service down"
    assert tracker.begin().status == SummaryStatus.PENDING


def test_tracker_unexpected_error_does_not_stay_pending():
    def requester(records):
        raise KeyError("text")

    tracker = SummaryTracker(requester=requester)
    tracker.begin()
    failed = tracker.run([])

    assert failed.status == SummaryStatus.FAILED
    assert "text" in failed.error
    assert tracker.reset().status == SummaryStatus.IDLE
    assert tracker.begin().status == SummaryStatus.PENDING


def test_share_text():
    assert share_text("Alex", "brief") == "Medical Summary for Alex\n\nbrief"
    assert share_text("Alex", None).endswith("Please generate an AI summary first.")
