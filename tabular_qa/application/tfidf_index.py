# tabular_qa/application/tfidf_index.py

from collections import Counter
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from tabular_qa.domain.fields import FieldLookup, primary_text
from tabular_qa.domain.models import Document, Record
from tabular_qa.domain.tokenizer import tokenize


class TfidfIndex:
    """
    Immutable TF-IDF index over knowledge-base records.

    Built once at startup with `TfidfIndex.build(...)`, then shared read-only
    by every request:

        idf(t)   = ln((N + 1) / (df(t) + 1)) + 1
        w(d, t)  = tf(d, t) * idf(t)
        v(d)     = w(d) / ||w(d)||₂        (empty when ||w(d)|| == 0)

    Document vectors are kept twice: as sparse mappings on each Document and
    as a dense (N, V) matrix so a query is scored with one matrix product.
    """

    def __init__(
        self,
        records: Sequence[Record],
        documents: Sequence[Document],
        vocabulary: Sequence[str],
        idf: Mapping[str, float],
        matrix: np.ndarray,
    ):
        self._records: Tuple[Record, ...] = tuple(records)
        self._documents: Tuple[Document, ...] = tuple(documents)
        self._vocabulary: Tuple[str, ...] = tuple(vocabulary)
        self._term_ids: Mapping[str, int] = MappingProxyType(
            {term: i for i, term in enumerate(self._vocabulary)}
        )
        self._idf: Mapping[str, float] = MappingProxyType(dict(idf))
        self._idf_array = np.array([self._idf[t] for t in self._vocabulary], dtype=np.float64)
        self._matrix = matrix
        self._matrix.setflags(write=False)

    # ─── Construction ────────────────────────────────────────────────────────

    @classmethod
    def build(cls, records: Sequence[Record], text_fields: FieldLookup) -> "TfidfIndex":
        """Tokenize every record, compute the IDF table and unit tf-idf vectors."""
        texts = [primary_text(record, text_fields) for record in records]
        token_lists = [tuple(tokenize(text)) for text in texts]
        term_counts = [Counter(tokens) for tokens in token_lists]

        vocabulary = sorted({token for tokens in token_lists for token in tokens})
        term_ids = {term: i for i, term in enumerate(vocabulary)}
        n_docs, n_terms = len(records), len(vocabulary)

        tf_matrix = np.zeros((n_docs, n_terms), dtype=np.float64)
        for row, counts in enumerate(term_counts):
            for term, count in counts.items():
                tf_matrix[row, term_ids[term]] = count

        document_frequency = np.count_nonzero(tf_matrix, axis=0)
        idf_array = np.log((n_docs + 1) / (document_frequency + 1)) + 1.0

        weights = tf_matrix * idf_array
        norms = np.linalg.norm(weights, axis=1)
        safe_norms = np.where(norms > 0, norms, 1.0)
        matrix = weights / safe_norms[:, None]

        idf = {term: float(idf_array[i]) for i, term in enumerate(vocabulary)}

        documents: List[Document] = []
        for row, (text, tokens, counts) in enumerate(zip(texts, token_lists, term_counts)):
            vector: Dict[str, float] = {
                term: float(matrix[row, term_ids[term]]) for term in sorted(counts)
            }
            documents.append(Document(
                record_index=row,
                text=text,
                tokens=tokens,
                term_frequency=MappingProxyType(dict(counts)),
                tfidf_vector=MappingProxyType(vector),
            ))

        print(f"[TfidfIndex] Indexed {n_docs} records. Vocab size: {n_terms}")
        return cls(records, documents, vocabulary, idf, matrix)

    # ─── Read-only views ─────────────────────────────────────────────────────

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def documents(self) -> Tuple[Document, ...]:
        return self._documents

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        return self._vocabulary

    @property
    def idf(self) -> Mapping[str, float]:
        return self._idf

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def is_empty(self) -> bool:
        return not self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def group_counts(self) -> List[dict]:
        """Records per sheet, in first-seen order."""
        counts: Dict[str, int] = {}
        for record in self._records:
            counts[record.group] = counts.get(record.group, 0) + 1
        return [{"sheet": name, "count": count} for name, count in counts.items()]

    # ─── Query scoring ───────────────────────────────────────────────────────

    def query_vector(self, query_tokens: Sequence[str]) -> np.ndarray:
        """
        Unit tf-idf vector of a query in this index's term space.
        Terms unseen at build time have no column and contribute nothing.
        """
        vector = np.zeros(len(self._vocabulary), dtype=np.float64)
        for term, count in Counter(query_tokens).items():
            term_id = self._term_ids.get(term)
            if term_id is not None:
                vector[term_id] = count * self._idf_array[term_id]

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector

    def cosine_scores(self, query_tokens: Sequence[str]) -> np.ndarray:
        """Cosine similarity of the query against every document, shape (N,)."""
        if self.is_empty():
            return np.zeros(0, dtype=np.float64)
        scores = self._matrix @ self.query_vector(query_tokens)
        # Unit vectors with non-negative weights: clamp float drift into [0, 1]
        return np.clip(scores, 0.0, 1.0)
