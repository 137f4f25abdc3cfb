"""
Turn the model's free-form reply into the structured fields of an analysis result.

Model output is untrusted free text, so nothing here raises on malformed input:
a missing score or an unusable card array simply leaves the field absent or empty.
All functions are pure.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Literal

from study_partner.ai.schema import AnalysisData, Card, Mode

_log = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100

CardPolicy = Literal["strict", "partial"]

_SCORE_RE = re.compile(r"score[：:\s]+([0-9]+)", re.IGNORECASE)
_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)


@dataclass(frozen=True)
class Extracted:
    """Cards were found and validated."""

    cards: list[Card]


@dataclass(frozen=True)
class Empty:
    """No usable cards; reason is for logging only."""

    reason: str
    cards: list[Card] = field(default_factory=list)


CardExtraction = Extracted | Empty


def extract_score(text: str) -> int | None:
    """
    Return the first "score" value in text if it lies within [0, 100].

    Accepted delimiters between the word and the digits are ':', '：' and whitespace.
    Out-of-range values are dropped, not clamped.
    """
    match = _SCORE_RE.search(text)
    if match is None:
        return None
    digits = match.group(1).lstrip("0") or "0"
    if len(digits) > len(str(SCORE_MAX)):
        return None
    score = int(digits, 10)
    if SCORE_MIN <= score <= SCORE_MAX:
        return score
    return None


def _card_search_space(text: str) -> str:
    fenced = _JSON_FENCE_RE.search(text)
    return fenced.group(1) if fenced else text


def _as_card(item: Any) -> Card | None:
    if not isinstance(item, dict):
        return None
    front = item.get("front")
    back = item.get("back")
    if not isinstance(front, str) or not isinstance(back, str):
        return None
    if not front or not back:
        return None
    return Card(front=front, back=back)


def extract_cards(text: str, policy: CardPolicy = "strict") -> CardExtraction:
    """
    Find a JSON array of {front, back} objects in text.

    Searches inside a ```json fence when one exists, otherwise the whole text, and takes
    everything from the first '[' to the last ']'. With policy="strict" one malformed
    element discards the whole array; with policy="partial" malformed elements are dropped.
    """
    space = _card_search_space(text)
    start = space.find("[")
    end = space.rfind("]")
    if start == -1 or end < start:
        return Empty("no bracketed array")
    try:
        parsed = json.loads(space[start : end + 1])
    except (ValueError, RecursionError):
        return Empty("array is not valid JSON")
    if not isinstance(parsed, list):
        return Empty("parsed value is not an array")

    cards = [_as_card(item) for item in parsed]
    valid = [c for c in cards if c is not None]
    if len(valid) != len(cards):
        if policy == "strict":
            return Empty(f"{len(cards) - len(valid)} of {len(cards)} elements malformed")
        _log.debug("Dropped %s malformed card elements", len(cards) - len(valid))
    if policy == "partial" and not valid and cards:
        return Empty("no well-formed elements")
    return Extracted(valid)


def interpret(raw_text: str, mode: Mode, *, card_policy: CardPolicy = "strict") -> AnalysisData:
    """Build the mode-appropriate payload from the model's raw reply."""
    if mode == Mode.GRADE:
        score = extract_score(raw_text)
        if score is None:
            _log.debug("No in-range score found in GRADE reply")
        return AnalysisData(content=raw_text, score=score)
    if mode == Mode.ANKI:
        extraction = extract_cards(raw_text, card_policy)
        if isinstance(extraction, Empty):
            _log.info("Card extraction yielded nothing: %s", extraction.reason)
        return AnalysisData(content="", cards=list(extraction.cards))
    return AnalysisData(content=raw_text)
