# tabular_qa/domain/models.py

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union


FieldValue = Union[str, int, float]


class MatchMethod(str, Enum):
    """Which router branch produced an answer."""
    SMALL_TALK = "small-talk"
    RECORD_MATCH = "record-match"
    RECORD_SCRAPE = "record+scrape"
    WEB_SEARCH = "web-search"
    FALLBACK = "fallback"
    ERROR = "error"


@dataclass(frozen=True)
class Record:
    """
    A single row of the knowledge-base spreadsheet.

    Missing cells are simply absent from `fields`.
    """
    fields: Mapping[str, FieldValue]
    group: str
    row_index: int = 0

    def __post_init__(self) -> None:
        # Freeze the field mapping so the index never sees a mutated row
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str) -> Optional[FieldValue]:
        return self.fields.get(name)


@dataclass(frozen=True)
class Document:
    """
    Indexed representation of a Record: tokens + L2-normalized tf-idf weights.
    """
    record_index: int
    text: str
    tokens: Tuple[str, ...]
    term_frequency: Mapping[str, int] = field(repr=False)
    tfidf_vector: Mapping[str, float] = field(repr=False)


@dataclass
class RankedResult:
    """
    Represents one record's ranking for a single query.
    """
    record: Record
    document: Document
    score: float
    cosine: float = 0.0
    jaccard: float = 0.0
    field_bonus: float = 0.0
    confidence: float = 0.0

    def __repr__(self) -> str:
        preview = self.document.text[:80].replace("\n", " ")
        return (
            f"RankedResult(score={self.score:.4f}, "
            f"confidence={self.confidence:.3f}, "
            f"sheet='{self.record.group}', "
            f"preview='{preview}')"
        )


@dataclass
class ScoredSentence:
    text: str
    score: float
    position: int = 0


@dataclass(frozen=True)
class WebAnswer:
    """Result of a generic web search: best text found (if any) and where it came from."""
    text: Optional[str]
    source_url: str


@dataclass
class Answer:
    """
    Final response of the answer router for one question.
    """
    answer: str
    match_method: Optional[MatchMethod] = None
    source: Optional[str] = None
    sheet: Optional[str] = None
    confidence: Optional[float] = None

    def to_payload(self) -> dict:
        """JSON shape returned by the /ask endpoint (optional keys omitted)."""
        payload: dict = {"answer": self.answer}
        if self.source:
            payload["source"] = self.source
        if self.sheet is not None:
            payload["sheet"] = self.sheet
        if self.confidence is not None:
            payload["confidence"] = round(float(self.confidence), 3)
        if self.match_method is not None:
            payload["matchMethod"] = self.match_method.value
        return payload
