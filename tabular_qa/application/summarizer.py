# tabular_qa/application/summarizer.py

import math
from dataclasses import dataclass
from typing import List, Optional

from tabular_qa.domain.models import ScoredSentence
from tabular_qa.domain.similarity import cosine_similarity, jaccard_similarity, overlap_ratio
from tabular_qa.domain.tokenizer import tokenize


DEFAULT_TOP_K = 6


@dataclass(frozen=True)
class SentenceWeights:
    """Line-level relevance weights. Must sum to 1.0."""
    cosine: float = 0.5
    jaccard: float = 0.3
    overlap: float = 0.2

    def __post_init__(self) -> None:
        total = self.cosine + self.jaccard + self.overlap
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Sentence weights must sum to 1.0, got {total:.4f}")


class ExtractiveSummarizer:
    """
    Picks the lines of a page most relevant to a query.

    Lines are returned most-relevant-first, not in page order, separated by
    blank lines. Returns None when the text has no non-empty line.
    """

    def __init__(self, top_k: int = DEFAULT_TOP_K, weights: SentenceWeights = SentenceWeights()):
        if top_k < 1:
            raise ValueError("top_k must be at least 1.")
        self._top_k = top_k
        self._weights = weights

    def score_lines(self, text: Optional[str], query: str) -> List[ScoredSentence]:
        """Every non-empty line with its relevance score, ranked descending (stable)."""
        if not text:
            return []

        lines = [line.strip() for line in text.splitlines()]
        query_tokens = tokenize(query)

        scored: List[ScoredSentence] = []
        for position, line in enumerate(lines):
            if not line:
                continue
            line_tokens = tokenize(line)
            score = (
                self._weights.cosine * cosine_similarity(query_tokens, line_tokens)
                + self._weights.jaccard * jaccard_similarity(query_tokens, line_tokens)
                + self._weights.overlap * overlap_ratio(line_tokens, query_tokens)
            )
            scored.append(ScoredSentence(text=line, score=score, position=position))

        scored.sort(key=lambda s: s.score, reverse=True)
        return scored

    def summarize(self, text: Optional[str], query: str) -> Optional[str]:
        scored = self.score_lines(text, query)
        if not scored:
            return None
        return "\n\n".join(s.text for s in scored[: self._top_k])
