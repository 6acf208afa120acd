import json
import logging
import threading
from datetime import datetime

from backend.config import settings
from backend.errors import SummaryGenerationError, SummaryInProgressError
from backend.schemas.record import MedicalRecord
from backend.schemas.summary import SummaryState, SummaryStatus
from backend.services.llm import get_llm

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """
As a specialized medical assistant for thyroid cancer, summarize the following medical history
records into a concise, professional briefing for a new oncologist.

Format the response clearly with the following sections:
1. **Patient Overview**: Brief history and current status.
2. **Clinical Timeline**: Key milestones (diagnosis, imaging highlights, surgery).
3. **Key Lab Trends**: Focus on TSH, Thyroglobulin (Tg) and Calcium trends.
4. **Current Status & Staging**: Based on the latest pathology and imaging.
5. **Questions for Next Appointment**: Suggest 3-5 specific questions the patient should ask.

User Records:
{records_json}

Keep the tone professional and the information easy to scan.
"""

SHARE_PLACEHOLDER = "Please generate an AI summary first."


def build_summary_prompt(records: list[MedicalRecord]) -> str:
    records_json = json.dumps([record.model_dump(mode="json") for record in records], indent=2)
    return SUMMARY_PROMPT.format(records_json=records_json)


def request_summary(records: list[MedicalRecord]) -> str:
    """Ask the AI collaborator for a clinician briefing and return its text untouched."""
    prompt = build_summary_prompt(records)
    try:
        llm = get_llm(settings.summary_model)
        response = llm.complete(prompt)
    except Exception as exc:
        logger.error("Summary generation failed: %s", exc)
        raise SummaryGenerationError(f"Summary generation failed: {exc}") from exc

    text = getattr(response, "text", None)
    if not text or not text.strip():
        raise SummaryGenerationError("The summary service returned an empty response")
    return text


def share_text(profile_name: str, summary: str | None) -> str:
    return f"Medical Summary for {profile_name}\n\n{summary or SHARE_PLACEHOLDER}"


class SummaryTracker:
    """Single-flight state of the user-visible summary action.

    ``begin`` claims the slot and ``run`` fills it with the outcome; a second
    ``begin`` while a request is pending is refused rather than raced.
    """

    def __init__(self, requester=request_summary):
        self._requester = requester
        self._lock = threading.Lock()
        self._state = SummaryState()

    @property
    def state(self) -> SummaryState:
        with self._lock:
            return self._state.model_copy()

    def begin(self) -> SummaryState:
        with self._lock:
            if self._state.status == SummaryStatus.PENDING:
                raise SummaryInProgressError("A summary is already being generated")
            self._state = SummaryState(status=SummaryStatus.PENDING, requested_at=datetime.utcnow())
            return self._state.model_copy()

    def run(self, records: list[MedicalRecord]) -> SummaryState:
        try:
            text = self._requester(records)
        except SummaryGenerationError as exc:
            outcome = {"status": SummaryStatus.FAILED, "error": str(exc)}
        except Exception as exc:
            logger.exception("Summary request crashed: %s", exc)
            outcome = {"status": SummaryStatus.FAILED, "error": f"Summary generation failed: {exc}"}
        else:
            outcome = {"status": SummaryStatus.SUCCEEDED, "text": text}
        with self._lock:
            self._state = self._state.model_copy(update={**outcome, "completed_at": datetime.utcnow()})
            return self._state.model_copy()

    def reset(self) -> SummaryState:
        with self._lock:
            if self._state.status == SummaryStatus.PENDING:
                raise SummaryInProgressError("Cannot clear a summary that is still being generated")
            self._state = SummaryState()
            return self._state.model_copy()
