"""
Keyword Extractor
------------------
Frequency-ranks significant words (>= 4 chars, not a stop word) across a
batch of records. Each keyword carries the mean polarity of the records it
appeared in; the polarity is scored on the whole record, not the word.

Input:  List[str], top_n
Output: List[KeywordStat]  (count desc, ties in first-seen order)
"""

import re
import logging
from typing import Dict, FrozenSet, List, Optional, Sequence

from analysis.sentiment import SentimentScorer
from config.lexicon import STOP_WORDS
from config.settings import settings
from models.schemas import KeywordStat

logger = logging.getLogger(__name__)


class KeywordExtractor:

    def __init__(
        self,
        scorer: Optional[SentimentScorer] = None,
        stop_words: FrozenSet[str] = STOP_WORDS,
        min_length: int = settings.KEYWORD_MIN_LENGTH,
    ):
        self.scorer = scorer or SentimentScorer()
        self.stop_words = stop_words
        self._word_re = re.compile(rf"\b\w{{{min_length},}}\b")

    def words(self, text: str) -> List[str]:
        return [w for w in self._word_re.findall(text.lower()) if w not in self.stop_words]

    def extract(
        self,
        texts: Sequence[str],
        top_n: int = settings.KEYWORD_TOP_N,
        polarities: Optional[Sequence[float]] = None,
    ) -> List[KeywordStat]:
        """
        `polarities`, when given, are the already-scored record polarities
        (one per text, same order); otherwise each text is scored here.
        """
        if polarities is not None and len(polarities) != len(texts):
            raise ValueError(f"Got {len(polarities)} polarities for {len(texts)} texts")
        if top_n <= 0:
            return []
        if polarities is None:
            polarities = [self.scorer.score(t).polarity for t in texts]

        # dict keeps first-insertion order, which is the tie-break below
        by_word: Dict[str, List[float]] = {}
        for text, polarity in zip(texts, polarities):
            for word in self.words(text):
                by_word.setdefault(word, []).append(polarity)

        stats = [
            KeywordStat(word=word, count=len(values), avg_sentiment=sum(values) / len(values))
            for word, values in by_word.items()
        ]
        stats.sort(key=lambda k: k.count, reverse=True)

        logger.debug(f"Keyword extraction: {len(stats)} distinct words from {len(texts)} records")
        return stats[:top_n]
