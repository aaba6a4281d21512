# tabular_qa/infrastructure/container.py
#
# Composition root shared by api.py and main.py.

from dataclasses import dataclass
from typing import List

from tabular_qa.application.answer_router import AnswerRouter, RouterConfig
from tabular_qa.application.hybrid_scorer import HybridScorer, ScoringWeights
from tabular_qa.application.summarizer import ExtractiveSummarizer, SentenceWeights
from tabular_qa.application.tfidf_index import TfidfIndex
from tabular_qa.domain.fields import FieldLookup
from tabular_qa.domain.interfaces import PageFetcherPort, RowSourcePort, WebAnswerPort
from tabular_qa.domain.models import Record
from tabular_qa.infrastructure.config import Settings
from tabular_qa.infrastructure.page_fetcher import RequestsPageFetcher
from tabular_qa.infrastructure.spreadsheet_loader import SpreadsheetRowSource
from tabular_qa.infrastructure.web_answer import DuckDuckGoWebAnswer


@dataclass
class Container:
    """Everything a request handler needs, built once at process start."""
    settings: Settings
    index: TfidfIndex
    router: AnswerRouter


def load_records(row_source: RowSourcePort) -> List[Record]:
    """Load rows; a missing or unreadable data file leaves the index empty."""
    try:
        return row_source.load()
    except Exception as error:
        print(f"[Container] ⚠ Data load failed: {error}. Continuing with an empty index; "
              f"every question will go to web search.")
        return []


def build_container(
    settings: Settings,
    row_source: RowSourcePort | None = None,
    page_fetcher: PageFetcherPort | None = None,
    web_answer: WebAnswerPort | None = None,
) -> Container:
    row_source = row_source or SpreadsheetRowSource(settings.DATA_PATH)
    page_fetcher = page_fetcher or RequestsPageFetcher(timeout=settings.FETCH_TIMEOUT_SECONDS)
    web_answer = web_answer or DuckDuckGoWebAnswer(timeout=settings.SEARCH_TIMEOUT_SECONDS)

    records = load_records(row_source)
    index = TfidfIndex.build(records, FieldLookup.of(settings.TEXT_FIELDS))

    scorer = HybridScorer(
        index=index,
        title_fields=FieldLookup.of(settings.TITLE_FIELDS),
        weights=ScoringWeights(
            cosine=settings.COSINE_WEIGHT,
            jaccard=settings.JACCARD_WEIGHT,
            field_bonus=settings.FIELD_BONUS_WEIGHT,
        ),
        bonus_increment=settings.FIELD_BONUS_INCREMENT,
        bonus_cap=settings.FIELD_BONUS_CAP,
    )
    summarizer = ExtractiveSummarizer(
        top_k=settings.SUMMARY_TOP_K,
        weights=SentenceWeights(
            cosine=settings.LINE_COSINE_WEIGHT,
            jaccard=settings.LINE_JACCARD_WEIGHT,
            overlap=settings.LINE_OVERLAP_WEIGHT,
        ),
    )
    router = AnswerRouter(
        scorer=scorer,
        summarizer=summarizer,
        page_fetcher=page_fetcher,
        web_answer=web_answer,
        link_fields=FieldLookup.of(settings.LINK_FIELDS),
        config=RouterConfig(
            confidence_threshold=settings.CONFIDENCE_THRESHOLD,
            min_summary_chars=settings.MIN_SUMMARY_CHARS,
            web_abstract_max_chars=settings.WEB_ABSTRACT_MAX_CHARS,
            small_talk=dict(settings.SMALL_TALK),
            blocked_signatures=tuple(s.lower() for s in settings.BLOCKED_SIGNATURES),
        ),
    )
    return Container(settings=settings, index=index, router=router)
