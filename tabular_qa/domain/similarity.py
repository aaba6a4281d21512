# tabular_qa/domain/similarity.py
#
# Token-level similarity measures shared by the hybrid scorer and the
# extractive summarizer. Inputs are token sequences as produced by tokenize().

import math
from collections import Counter
from typing import Iterable, Sequence


def cosine_similarity(a_tokens: Sequence[str], b_tokens: Sequence[str]) -> float:
    """
    Cosine similarity of raw term-count vectors.
    Returns 0.0 when either side is empty.
    """
    a_counts = Counter(a_tokens)
    b_counts = Counter(b_tokens)
    if not a_counts or not b_counts:
        return 0.0

    dot = sum(count * b_counts[token] for token, count in a_counts.items())
    sq_a = sum(c * c for c in a_counts.values())
    sq_b = sum(c * c for c in b_counts.values())

    # Integer counts: sqrt(sq_a * sq_b) is exact when a == b, so self-similarity is 1.0
    return min(1.0, dot / math.sqrt(sq_a * sq_b))


def jaccard_similarity(a_tokens: Iterable[str], b_tokens: Iterable[str]) -> float:
    """|A ∩ B| / |A ∪ B| over token sets; an empty union counts as 1."""
    a_set = set(a_tokens)
    b_set = set(b_tokens)
    union = len(a_set | b_set) or 1
    return len(a_set & b_set) / union


def overlap_ratio(line_tokens: Sequence[str], query_tokens: Sequence[str]) -> float:
    """Number of line tokens found in the query, divided by query length (min 1)."""
    query_set = set(query_tokens)
    matched = sum(1 for token in line_tokens if token in query_set)
    return matched / (len(query_tokens) or 1)
