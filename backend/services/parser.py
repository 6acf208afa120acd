import json
import logging
import re

from pydantic import ValidationError as SchemaError

from backend.config import settings
from backend.errors import SummaryGenerationError, ValidationError
from backend.schemas.summary import ExtractedLabResult
from backend.services.classifier import canonical_marker
from backend.services.llm import get_llm
from backend.services.record_editor import parse_lab_value

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """
Extract lab results from the following raw text from a medical report.
Focus on thyroid markers (TSH, Free T4, T3, Thyroglobulin, TgAb, Calcium).
Return STRICT JSON only: an array of objects with keys
"marker" (string), "value" (number) and "unit" (string).
If no lab results are present, return [].

Text: \"\"\"{text}\"\"\"
"""


def _strip_json_array(raw_text: str) -> str:
    text = raw_text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```(?:json)?\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def parse_extraction_response(raw_text: str) -> list[ExtractedLabResult]:
    """Read the collaborator's answer defensively; anything unusable yields []."""
    try:
        payload = json.loads(_strip_json_array(raw_text))
    except json.JSONDecodeError:
        logger.warning("Extraction response was not valid JSON")
        return []
    if not isinstance(payload, list):
        logger.warning("Extraction response was not a JSON array")
        return []

    results = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or not isinstance(item.get("marker"), str):
            continue
        try:
            value = parse_lab_value(item.get("value"), f"[{index}].value")
            unit = item.get("unit") if isinstance(item.get("unit"), str) else ""
            marker = canonical_marker(item["marker"])
            if not marker:
                continue
            results.append(ExtractedLabResult(marker=marker, value=value, unit=unit.strip()))
        except (ValidationError, SchemaError):
            logger.debug("Skipping malformed extraction item %d: %r", index, item)
    return results


def extract_lab_results(text: str) -> list[ExtractedLabResult]:
    if not text or not text.strip():
        raise ValidationError("text", "Report text is required")
    if len(text) > settings.max_report_text_chars:
        raise ValidationError("text", f"Report text is too long. Max is {settings.max_report_text_chars} characters")

    try:
        llm = get_llm(settings.extraction_model, temperature=0.0)
        response = llm.complete(EXTRACTION_PROMPT.format(text=text))
    except Exception as exc:
        logger.error("Lab report extraction failed: %s", exc)
        raise SummaryGenerationError(f"Could not extract lab results: {exc}") from exc
    return parse_extraction_response(getattr(response, "text", None) or "")
