"""Gemini generateContent response dataclasses.

WHY: The Gemini REST API returns nested JSON (candidates → content →
parts → text). Typed dataclasses make the structure explicit and keep
the text-extraction rules in one place.

HOW: Each dataclass maps to one JSON object. Factory methods
(from_dict) parse raw API responses and tolerate missing fields, since
blocked or empty responses omit whole sub-objects.

RULES:
- Only the first candidate is used for text
- text concatenates all text parts of that candidate
- A response with no candidates (e.g. safety-blocked) has text ""
- finish_reason and block_reason are kept for logging only
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Candidate:
    """One generated candidate from a generateContent response."""

    text: str
    finish_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Candidate:
        parts = (data.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        return cls(text=text, finish_reason=data.get("finishReason"))


@dataclass
class GenerateContentResponse:
    """Parsed response of POST /models/{model}:generateContent.

    RULES:
    - candidates may be empty when the prompt was blocked
    - block_reason comes from promptFeedback.blockReason when present
    """

    candidates: List[Candidate] = field(default_factory=list)
    block_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> GenerateContentResponse:
        feedback = data.get("promptFeedback") or {}
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
            block_reason=feedback.get("blockReason"),
        )

    @property
    def text(self) -> str:
        """Text of the first candidate, or "" when there is none."""
        if not self.candidates:
            return ""
        return self.candidates[0].text
