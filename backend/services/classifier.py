import re

from rapidfuzz import fuzz

from backend.config import settings
from backend.seed.record_seed import COMMON_MARKERS


def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _fuzzy_match_marker(name: str, threshold: int) -> tuple[str | None, int]:
    name_norm = _normalize(name)
    best_score = -1
    best_name = None

    for marker in COMMON_MARKERS:
        aliases = [marker["name"], *marker["aliases"]]
        for alias in aliases:
            alias_norm = _normalize(alias)
            # Short codes like "TG" or "CA" only count as exact hits.
            if len(alias_norm) <= 3:
                score = 100 if alias_norm == name_norm else 0
            else:
                score = fuzz.ratio(name_norm, alias_norm)
            if score > best_score:
                best_score = score
                best_name = marker["name"]

    if best_score >= threshold:
        return best_name, best_score
    return None, best_score


def canonical_marker(name: str, threshold: int | None = None) -> str:
    """Map a raw marker spelling onto the common vocabulary, or return it unchanged."""
    cleaned = name.strip()
    if not cleaned:
        return cleaned
    score_threshold = threshold if threshold is not None else settings.classifier_fuzzy_threshold
    match, _ = _fuzzy_match_marker(cleaned, score_threshold)
    return match or cleaned
