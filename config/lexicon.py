"""
Word tables for lexicon-based sentiment scoring and keyword extraction.

The tables are immutable and loaded once per process. Components receive a
`Lexicon` / stop-word set through their constructors, so tests can swap in
their own tables.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Iterable

from config.settings import settings

logger = logging.getLogger(__name__)


POSITIVE_WORDS = frozenset({
    "excellent", "amazing", "great", "wonderful", "fantastic", "awesome", "outstanding",
    "superb", "brilliant", "perfect", "love", "best", "incredible", "impressive",
    "beautiful", "good", "nice", "happy", "delighted", "satisfied", "recommend",
    "quality", "reliable", "efficient", "helpful", "professional", "friendly",
})

NEGATIVE_WORDS = frozenset({
    "terrible", "awful", "horrible", "bad", "worst", "disappointing", "poor",
    "useless", "pathetic", "disgusting", "hate", "annoying", "frustrating",
    "slow", "broken", "defective", "waste", "scam", "fraud", "cheap", "flawed",
    "difficult", "confusing", "unreliable", "unprofessional", "rude",
})

INTENSIFIERS = frozenset({"very", "extremely", "absolutely", "totally", "completely"})

# Contracted forms never match a token (the tokenizer splits on apostrophes).
NEGATIONS = frozenset({
    "not", "no", "never", "neither", "nobody", "nothing",
    "don't", "doesn't", "didn't", "won't", "wouldn't", "shouldn't", "couldn't",
})

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "is", "was", "are", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "should", "could",
    "may", "might", "must", "can", "this", "that", "these", "those", "i", "you",
    "he", "she", "it", "we", "they", "what", "which", "who", "when", "where",
    "why", "how",
})


def _words(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(str(v).strip().lower() for v in values if str(v).strip())


@dataclass(frozen=True)
class Lexicon:
    """Sentiment word tables used by the scorer."""
    positive: FrozenSet[str] = POSITIVE_WORDS
    negative: FrozenSet[str] = NEGATIVE_WORDS
    intensifiers: FrozenSet[str] = INTENSIFIERS
    negations: FrozenSet[str] = NEGATIONS

    @classmethod
    def from_json(cls, path: str) -> "Lexicon":
        """
        Load a lexicon from a JSON file with optional keys
        `positive`, `negative`, `intensifiers` and `negations`.
        Missing keys fall back to the built-in tables.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Lexicon file {path} must contain a JSON object")

        return cls(
            positive=_words(data["positive"]) if "positive" in data else POSITIVE_WORDS,
            negative=_words(data["negative"]) if "negative" in data else NEGATIVE_WORDS,
            intensifiers=_words(data["intensifiers"]) if "intensifiers" in data else INTENSIFIERS,
            negations=_words(data["negations"]) if "negations" in data else NEGATIONS,
        )


DEFAULT_LEXICON = Lexicon()


@lru_cache(maxsize=1)
def get_lexicon() -> Lexicon:
    """Process-wide lexicon: LEXICON_PATH if configured, else the built-in tables."""
    if settings.LEXICON_PATH:
        logger.info(f"Loading lexicon from {settings.LEXICON_PATH}")
        return Lexicon.from_json(settings.LEXICON_PATH)
    return DEFAULT_LEXICON
