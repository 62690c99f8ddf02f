"""
Lexicon Sentiment Scorer
-------------------------
Scores a single text for polarity, confidence and subjectivity using fixed
positive / negative word tables with one-token negation and intensifier
lookback.

  polarity     = clamp(score / matched, -1, 1)
  confidence   = min(100, matched * 10)
  subjectivity = min(1, 0.5 * matched / tokens)

Input:  str
Output: SentimentResult
"""

import re
import logging
from typing import List, Optional

from config.lexicon import Lexicon, get_lexicon
from config.settings import settings
from models.schemas import Sentiment, SentimentResult

logger = logging.getLogger(__name__)


# Letters/digits only; "don't" splits into "don", "t".
_TOKEN_RE = re.compile(r"\b\w+\b")


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens, punctuation dropped."""
    if not text:
        return []
    return _TOKEN_RE.findall(text.lower())


def classify(polarity: float, threshold: float = settings.POLARITY_THRESHOLD) -> Sentiment:
    if polarity > threshold:
        return Sentiment.POSITIVE
    if polarity < -threshold:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


class SentimentScorer:
    """Deterministic lexicon scorer. One call per record."""

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        intensifier_multiplier: float = settings.INTENSIFIER_MULTIPLIER,
        confidence_per_match: float = settings.CONFIDENCE_PER_MATCH,
        subjectivity_per_match: float = settings.SUBJECTIVITY_PER_MATCH,
    ):
        self.lexicon = lexicon or get_lexicon()
        self.intensifier_multiplier = intensifier_multiplier
        self.confidence_per_match = confidence_per_match
        self.subjectivity_per_match = subjectivity_per_match

    def score(self, text: str) -> SentimentResult:
        tokens = tokenize(text)
        lex = self.lexicon

        score = 0.0
        matched = 0
        subjectivity_acc = 0.0

        for i, token in enumerate(tokens):
            if token in lex.positive:
                direction = 1.0
            elif token in lex.negative:
                direction = -1.0
            else:
                continue

            prev = tokens[i - 1] if i > 0 else ""
            if prev in lex.negations:
                direction = -direction
            multiplier = self.intensifier_multiplier if prev in lex.intensifiers else 1.0

            score += direction * multiplier
            matched += 1
            subjectivity_acc += self.subjectivity_per_match

        polarity = max(-1.0, min(1.0, score / matched)) if matched else 0.0
        confidence = min(100.0, matched * self.confidence_per_match)
        subjectivity = min(1.0, subjectivity_acc / len(tokens)) if tokens else 0.0

        return SentimentResult(
            text=text,
            sentiment=classify(polarity),
            polarity=polarity,
            confidence=confidence,
            subjectivity=subjectivity,
        )

    def score_many(self, texts: List[str]) -> List[SentimentResult]:
        results = [self.score(t) for t in texts]
        logger.debug(f"Scored {len(results)} records")
        return results
