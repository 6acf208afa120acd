import pytest

from backend.errors import SummaryGenerationError, ValidationError
from backend.services.classifier import canonical_marker
from backend.services.parser import extract_lab_results, parse_extraction_response


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("TSH", "TSH"),
        ("Tg", "Thyroglobulin"),
        ("FREE THYROXINE", "Free T4"),
        ("free t4", "Free T4"),
        ("Thyroglobulin Ab", "TgAb"),
        ("Ferritin", "Ferritin"),
        ("  Calcium ", "Calcium"),
    ],
)
def test_canonical_marker(raw, expected):
    assert canonical_marker(raw) == expected


def test_parse_plain_array():
    results = parse_extraction_response('[{"marker": "TSH", "value": 0.05, "unit": "mIU/L"}]')
    assert [(r.marker, r.value, r.unit) for r in results] == [("TSH", 0.05, "mIU/L")]


def test_parse_fenced_array_with_chatter():
    raw = 'Here you go:\n```json\n[{"marker": "Tg", "value": "0.2", "unit": "ng/mL"}]\n```'
    results = parse_extraction_response(raw)
    assert [(r.marker, r.value) for r in results] == [("Thyroglobulin", 0.2)]


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json at all",
        '[{"marker": "TSH", "value": 1.0',
        '{"marker": "TSH", "value": 1.0, "unit": "mIU/L"}',
        "null",
    ],
)
def test_malformed_response_yields_empty_list(raw):
    assert parse_extraction_response(raw) == []


def test_malformed_items_are_skipped():
    raw = """[
        {"marker": "TSH", "value": 0.4, "unit": "mIU/L"},
        {"marker": "Calcium", "value": "low", "unit": "mg/dL"},
        {"marker": 7, "value": 1},
        "junk",
        {"marker": "Free T4", "value": 1.3}
    ]"""
    results = parse_extraction_response(raw)
    assert [(r.marker, r.value, r.unit) for r in results] == [("TSH", 0.4, "mIU/L"), ("Free T4", 1.3, "")]


class _FakeLLM:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    def complete(self, prompt):
        if self.error:
            raise self.error
        return type("Response", (), {"text": self.text})()


def test_extract_lab_results(monkeypatch):
    fake = _FakeLLM(text='[{"marker": "TSH", "value": 2.1, "unit": "mIU/L"}]')
    monkeypatch.setattr("backend.services.parser.get_llm", lambda model, temperature=0.2: fake)
    results = extract_lab_results("TSH 2.1 mIU/L (0.4-4.0)")
    assert results[0].marker == "TSH"


def test_extract_reports_collaborator_failure(monkeypatch):
    monkeypatch.setattr(
        "backend.services.parser.get_llm",
        lambda model, temperature=0.2: _FakeLLM(error=TimeoutError("slow")),
    )
    with pytest.raises(SummaryGenerationError):
        extract_lab_results("TSH 2.1")


def test_extract_rejects_blank_and_oversized_text(monkeypatch):
    with pytest.raises(ValidationError):
        extract_lab_results("   ")
    monkeypatch.setattr("backend.services.parser.settings.max_report_text_chars", 10)
    with pytest.raises(ValidationError):
        extract_lab_results("x" * 11)
