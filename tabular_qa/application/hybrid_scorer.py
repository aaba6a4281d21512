# tabular_qa/application/hybrid_scorer.py

import math
from dataclasses import dataclass
from typing import List, Sequence

from tabular_qa.application.tfidf_index import TfidfIndex
from tabular_qa.domain.fields import FieldLookup
from tabular_qa.domain.models import RankedResult, Record
from tabular_qa.domain.similarity import jaccard_similarity
from tabular_qa.domain.tokenizer import tokenize


# Divisor floor for confidence when every score is 0
CONFIDENCE_EPSILON = 1e-9

DEFAULT_FIELD_BONUS_INCREMENT = 0.15
DEFAULT_FIELD_BONUS_CAP = 0.5


@dataclass(frozen=True)
class ScoringWeights:
    """
    Weights of the hybrid formula. Tunable, but must sum to 1.0.

        score = cosine * tf-idf cosine + jaccard * token-set overlap
                + field_bonus * title-field match bonus
    """
    cosine: float = 0.55
    jaccard: float = 0.25
    field_bonus: float = 0.20

    def __post_init__(self) -> None:
        total = self.cosine + self.jaccard + self.field_bonus
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.4f}")


class HybridScorer:
    """
    Ranks every indexed record against a query by combining:
    - TF-IDF cosine similarity (distinctive terms)
    - Jaccard overlap of token sets (plain word coverage)
    - A bonus for query words that appear in title-like fields

    Confidence is each score relative to the best score of the same query,
    so the top result always has confidence 1.0 (unless every score is 0).
    """

    def __init__(
        self,
        index: TfidfIndex,
        title_fields: FieldLookup,
        weights: ScoringWeights = ScoringWeights(),
        bonus_increment: float = DEFAULT_FIELD_BONUS_INCREMENT,
        bonus_cap: float = DEFAULT_FIELD_BONUS_CAP,
    ):
        self._index = index
        self._title_fields = title_fields
        self._weights = weights
        self._bonus_increment = bonus_increment
        self._bonus_cap = bonus_cap

    @property
    def index(self) -> TfidfIndex:
        return self._index

    def rank(self, query: str) -> List[RankedResult]:
        """All records ranked by descending score (stable on ties)."""
        if self._index.is_empty():
            return []

        query_tokens = tokenize(query)
        cosine_scores = self._index.cosine_scores(query_tokens)

        results: List[RankedResult] = []
        for document, cosine in zip(self._index.documents, cosine_scores):
            record = self._index.records[document.record_index]
            jaccard = jaccard_similarity(query_tokens, document.tokens)
            bonus = self.field_bonus(query_tokens, record)
            score = (
                self._weights.cosine * float(cosine)
                + self._weights.jaccard * jaccard
                + self._weights.field_bonus * bonus
            )
            results.append(RankedResult(
                record=record,
                document=document,
                score=score,
                cosine=float(cosine),
                jaccard=jaccard,
                field_bonus=bonus,
            ))

        results.sort(key=lambda r: r.score, reverse=True)

        top_score = results[0].score
        denominator = top_score if top_score > 0 else CONFIDENCE_EPSILON
        for result in results:
            result.confidence = result.score / denominator

        return results

    def field_bonus(self, query_tokens: Sequence[str], record: Record) -> float:
        """+increment per query token found in each title-like field, capped."""
        bonus = 0.0
        for value in self._title_fields.values(record):
            field_tokens = set(tokenize(value))
            for token in query_tokens:
                if token in field_tokens:
                    bonus += self._bonus_increment
        return min(bonus, self._bonus_cap)
