"""
Keyword-overlap search over the static FAQ corpus.

The corpus is a JSON array of ``{"question", "answer", "keywords"}`` objects,
loaded once at startup and read-only afterwards.
"""

import json
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Below this best score the FAQ is considered irrelevant and the model is
# never called.
FAQ_MIN_SCORE = 2.0

KEYWORD_WEIGHT = 2.0
QUESTION_WORD_WEIGHT = 1.0
ANSWER_WORD_WEIGHT = 0.5
DEFAULT_TOP_K = 3

NO_CONTEXT_TEXT = "No relevant FAQ entries found."


class FAQEntry(BaseModel):
    """A single question/answer pair of the FAQ corpus."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    keywords: Tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("question", "answer")
    @classmethod
    def require_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v):
        if v is None:
            return ()
        return tuple(
            keyword.strip()
            for keyword in v
            if isinstance(keyword, str) and keyword.strip()
        )


class FAQSearchResult(BaseModel):
    entries: List[FAQEntry] = Field(default_factory=list)
    best_score: float = 0.0


def load_faq_entries(faq_file_path: Path | str) -> List[FAQEntry]:
    """Load FAQ entries from a JSON array file.

    A missing or unreadable file yields an empty corpus, which makes every
    question escalate to staff. Invalid entries are skipped.
    """
    path = Path(faq_file_path)
    logger.info(f"Using FAQ file path: {path}")

    if not path.exists():
        logger.error(f"FAQ file not found: {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load FAQ from {path}: {e}")
        return []

    if not isinstance(raw, list):
        logger.error(f"FAQ file {path} must contain a JSON array")
        return []

    entries: List[FAQEntry] = []
    for index, item in enumerate(raw):
        try:
            entries.append(FAQEntry.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid FAQ entry #{index}: {e.error_count()} error(s)")

    logger.info(f"Loaded {len(entries)} FAQ entries")
    return entries


def format_faq_context(entries: Sequence[FAQEntry]) -> str:
    """Format matched entries as knowledge base context for the model."""
    if not entries:
        return NO_CONTEXT_TEXT

    return "\n\n".join(
        f"FAQ Entry {idx}:\nQ: {entry.question}\nA: {entry.answer}"
        for idx, entry in enumerate(entries, start=1)
    )


class KnowledgeBase:
    """Rank FAQ entries against a user question."""

    def __init__(self, entries: Sequence[FAQEntry], top_k: int = DEFAULT_TOP_K):
        self._entries: Tuple[FAQEntry, ...] = tuple(entries)
        self.top_k = top_k

    @classmethod
    def from_file(cls, faq_file_path: Path | str) -> "KnowledgeBase":
        """Load a knowledge base from a JSON file; unreadable files give an empty one."""
        return cls(load_faq_entries(faq_file_path))

    @property
    def entries(self) -> Tuple[FAQEntry, ...]:
        return self._entries

    def score(self, entry: FAQEntry, query: str) -> float:
        """Keyword overlap score of one entry for a query.

        Each configured keyword found in the query counts 2, each query word
        found in the question 1, and in the answer 0.5.
        """
        lower_query = query.lower()
        lower_question = entry.question.lower()
        lower_answer = entry.answer.lower()

        score = 0.0
        for keyword in entry.keywords:
            if keyword.lower() in lower_query:
                score += KEYWORD_WEIGHT

        for word in lower_query.split():
            if word in lower_question:
                score += QUESTION_WORD_WEIGHT
            if word in lower_answer:
                score += ANSWER_WORD_WEIGHT

        return score

    def search(self, query: str) -> FAQSearchResult:
        """Return the top matching entries and the best score.

        Entries scoring 0 are excluded; ties keep corpus order.
        """
        if not query or not isinstance(query, str):
            return FAQSearchResult()

        scored = [(self.score(entry, query), entry) for entry in self._entries]
        matched = [item for item in scored if item[0] > 0]
        # sorted() is stable, so equal scores keep corpus order
        matched = sorted(matched, key=lambda item: item[0], reverse=True)

        best_score = matched[0][0] if matched else 0.0
        return FAQSearchResult(
            entries=[entry for _, entry in matched[: self.top_k]],
            best_score=best_score,
        )

    def __len__(self) -> int:
        return len(self._entries)
