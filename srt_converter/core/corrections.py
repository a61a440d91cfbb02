"""Spelling correction proposals — type, significance filter, and parsing.

WHY: Auto-generated transcripts mishear names and homophones. Before
generating subtitles, the user can review model-proposed corrections
and approve a subset that the generation prompt then applies. The
model also proposes no-op changes (case or punctuation only), which
would only clutter the review.

HOW: The generator returns a JSON array of correction objects.
parse_corrections() validates each entry, drops insignificant changes,
and assigns stable ids in review order.

RULES:
- A change is significant only if letters or digits differ after
  lowercasing and removing everything else
- Entries missing "original" or "correction" are skipped
- Ids are "corr-0", "corr-1", ... over the kept entries
- Every parsed correction starts selected
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List

logger = logging.getLogger(__name__)


@dataclass
class SpellingCorrection:
    """One proposed transcript correction.

    RULES:
    - original / correction: the text as transcribed and as corrected
    - context: a short snippet around the error, for review
    - timestamp: nearest transcript timestamp, used to locate the change
    - selected: whether the user approved it (default True)
    """

    id: str
    original: str
    correction: str
    context: str = ""
    timestamp: str = ""
    selected: bool = True


def _letters_and_digits(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum())


def is_significant_change(original: str, correction: str) -> bool:
    """Return True when the correction changes a letter or digit."""
    return _letters_and_digits(original) != _letters_and_digits(correction)


def parse_corrections(raw: Any) -> List[SpellingCorrection]:
    """Build SpellingCorrection objects from the generator's JSON output.

    Args:
        raw: A JSON string or an already-decoded list of dicts.

    Returns:
        Significant corrections, each selected, with ids in order.

    Raises:
        ValueError: If ``raw`` is a string that is not valid JSON, or the
            decoded value is not a list.
    """
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of corrections")

    corrections: List[SpellingCorrection] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        original = str(item.get("original") or "")
        correction = str(item.get("correction") or "")
        if not original or not correction:
            continue
        if not is_significant_change(original, correction):
            logger.debug("Skipping insignificant correction %r -> %r", original, correction)
            continue
        corrections.append(SpellingCorrection(
            id="corr-{}".format(len(corrections)),
            original=original,
            correction=correction,
            context=str(item.get("context") or ""),
            timestamp=str(item.get("timestamp") or ""),
        ))
    return corrections
