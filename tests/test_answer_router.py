# tests/test_answer_router.py

from unittest.mock import MagicMock

import pytest

from tabular_qa.application.answer_router import (
    AnswerRouter,
    BLOCKED_NOTE,
    LIMITED_CONTENT_NOTE,
    NOT_FOUND_MESSAGE,
    PROMPT_FOR_INPUT,
    RouterConfig,
)
from tabular_qa.application.hybrid_scorer import HybridScorer
from tabular_qa.application.summarizer import ExtractiveSummarizer
from tabular_qa.application.tfidf_index import TfidfIndex
from tabular_qa.domain.fields import FieldLookup
from tabular_qa.domain.interfaces import PageFetcherPort, WebAnswerPort
from tabular_qa.domain.models import MatchMethod, Record, WebAnswer


TEXT_FIELDS = FieldLookup.of(["Dataset / Reference Name", "Topic", "Description"])
TITLE_FIELDS = FieldLookup.of(["Dataset / Reference Name", "Topic"])
LINK_FIELDS = FieldLookup.of(["Link", "Primary URL", "URL"])

LINK = "https://example.org/pipeline-incidents"
SEARCH_URL = "https://duckduckgo.com/?q=test"

INCIDENT_RECORD = Record(
    fields={
        "Dataset / Reference Name": "Pipeline incident data",
        "Agency": "PHMSA",
        "Link": LINK,
    },
    group="Pipelines",
)

PAGE_TEXT = "\n".join([
    "Pipeline incident data is published monthly by the federal regulator.",
    "Navigation",
    "The incident data covers leaks, ruptures and pipeline fires since 2010.",
    "Contact us",
    "Copyright 2024",
    "Each pipeline incident record lists the operator, location and cause.",
    "Privacy policy",
    "Careers",
])


def _make_router(records, fetch_result=None, web_result=None, **config):
    index = TfidfIndex.build(records, TEXT_FIELDS)
    scorer = HybridScorer(index, TITLE_FIELDS)

    fetcher = MagicMock(spec=PageFetcherPort)
    fetcher.fetch.return_value = fetch_result

    web = MagicMock(spec=WebAnswerPort)
    web.search.return_value = web_result or WebAnswer(text=None, source_url=SEARCH_URL)

    router = AnswerRouter(
        scorer=scorer,
        summarizer=ExtractiveSummarizer(top_k=6),
        page_fetcher=fetcher,
        web_answer=web,
        link_fields=LINK_FIELDS,
        config=RouterConfig(**config),
    )
    return router, fetcher, web


# ── Input / small talk ────────────────────────────────────────────────────────

@pytest.mark.parametrize("question", [None, "", "   "])
def test_blank_question_prompts_for_input(question):
    router, fetcher, web = _make_router([INCIDENT_RECORD])
    answer = router.answer(question)

    assert answer.answer == PROMPT_FOR_INPUT
    assert answer.match_method is None
    web.search.assert_not_called()


def test_small_talk_answers_without_ranking():
    scorer = MagicMock(spec=HybridScorer)
    router = AnswerRouter(
        scorer=scorer,
        summarizer=ExtractiveSummarizer(),
        page_fetcher=MagicMock(spec=PageFetcherPort),
        web_answer=MagicMock(spec=WebAnswerPort),
        link_fields=LINK_FIELDS,
    )

    answer = router.answer("hi there")

    assert answer.match_method == MatchMethod.SMALL_TALK
    assert answer.answer.startswith("Hi there!")
    assert answer.confidence == 1.0
    scorer.rank.assert_not_called()


def test_small_talk_matches_whole_phrases():
    router, _, _ = _make_router([INCIDENT_RECORD])
    assert router.answer("Thank you so much!").answer == "Happy to help! 😊"


def test_small_talk_ignores_words_inside_other_words():
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result=None)
    answer = router.answer("which pipeline incident data exists")
    assert answer.match_method != MatchMethod.SMALL_TALK


# ── Web answer path ───────────────────────────────────────────────────────────

def test_empty_index_goes_to_web_with_exact_question():
    web_result = WebAnswer(text="The president is the head of state.", source_url=SEARCH_URL)
    router, fetcher, web = _make_router([], web_result=web_result)

    answer = router.answer("who is the president")

    web.search.assert_called_once_with("who is the president")
    fetcher.fetch.assert_not_called()
    assert answer.match_method == MatchMethod.WEB_SEARCH
    assert answer.answer == "The president is the head of state."
    assert answer.source == SEARCH_URL


def test_low_confidence_goes_to_web():
    router, fetcher, web = _make_router([INCIDENT_RECORD])
    answer = router.answer("volcano eruption forecast")

    web.search.assert_called_once_with("volcano eruption forecast")
    fetcher.fetch.assert_not_called()
    assert answer.match_method == MatchMethod.FALLBACK


def test_confidence_threshold_is_configurable():
    router, fetcher, web = _make_router([INCIDENT_RECORD], confidence_threshold=1.5)
    router.answer("pipeline incident data")

    web.search.assert_called_once()
    fetcher.fetch.assert_not_called()


def test_record_without_link_goes_to_web():
    record = Record(fields={"Dataset / Reference Name": "Fault zones"}, group="Hazards")
    router, fetcher, web = _make_router([record])

    router.answer("fault zones")

    web.search.assert_called_once_with("fault zones")
    fetcher.fetch.assert_not_called()


def test_web_without_text_reports_not_found():
    router, _, _ = _make_router([])
    answer = router.answer("something obscure")

    assert answer.answer == NOT_FOUND_MESSAGE
    assert answer.match_method == MatchMethod.FALLBACK
    assert answer.source == SEARCH_URL


def test_long_web_text_is_summarized():
    snippets = "\n".join([
        "Unrelated advertisement text goes here.",
        "Sacramento is the capital city of California.",
        "Another unrelated snippet.",
    ] * 3)
    router, _, _ = _make_router([], web_result=WebAnswer(text=snippets, source_url=SEARCH_URL))

    answer = router.answer("capital of california")

    assert answer.match_method == MatchMethod.WEB_SEARCH
    assert answer.answer.split("\n\n")[0] == "Sacramento is the capital city of California."


# ── Record + page path ────────────────────────────────────────────────────────

def test_matching_record_with_page_is_summarized():
    router, fetcher, web = _make_router([INCIDENT_RECORD], fetch_result=PAGE_TEXT)

    answer = router.answer("Pipeline incident data")

    fetcher.fetch.assert_called_once_with(LINK)
    web.search.assert_not_called()
    assert answer.match_method == MatchMethod.RECORD_SCRAPE
    assert answer.source == LINK
    assert answer.sheet == "Pipelines"
    assert answer.confidence == 1.0

    lines = [line for line in answer.answer.splitlines() if line.strip()]
    assert 0 < len(lines) <= 6
    assert lines[0] == "Pipeline incident data is published monthly by the federal regulator."


def test_failed_fetch_falls_back_to_record_dump():
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result=None)

    answer = router.answer("Pipeline incident data")

    assert answer.match_method == MatchMethod.RECORD_MATCH
    assert answer.sheet == "Pipelines"
    assert answer.source is None
    assert "Sheet: Pipelines" in answer.answer
    assert BLOCKED_NOTE in answer.answer
    assert "Agency: PHMSA" in answer.answer
    assert f"Link: {LINK}" in answer.answer


def test_bot_wall_is_treated_as_blocked():
    page = "Checking your browser before accessing example.org.\nPlease verify you are human."
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result=page)

    answer = router.answer("Pipeline incident data")

    assert answer.match_method == MatchMethod.RECORD_MATCH
    assert BLOCKED_NOTE in answer.answer


def test_short_page_falls_back_with_limited_content_note():
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result="Loading...")

    answer = router.answer("Pipeline incident data")

    assert answer.match_method == MatchMethod.RECORD_MATCH
    assert LIMITED_CONTENT_NOTE in answer.answer
    assert answer.source == LINK


def test_record_dump_lists_fields_in_order():
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result=None)
    lines = router.answer("Pipeline incident data").answer.splitlines()

    assert lines[:3] == ["Sheet: Pipelines", "Confidence: 1.0", BLOCKED_NOTE]
    assert lines[3] == ""
    assert lines[4:] == [
        "Dataset / Reference Name: Pipeline incident data",
        "Agency: PHMSA",
        f"Link: {LINK}",
    ]


# ── Payload ───────────────────────────────────────────────────────────────────

def test_payload_uses_camel_case_and_omits_missing_keys():
    router, _, _ = _make_router([INCIDENT_RECORD], fetch_result=PAGE_TEXT)
    payload = router.answer("Pipeline incident data").to_payload()

    assert payload["matchMethod"] == "record+scrape"
    assert payload["confidence"] == 1.0
    assert payload["sheet"] == "Pipelines"

    prompt = router.answer("").to_payload()
    assert prompt == {"answer": PROMPT_FOR_INPUT}


# ── Collaborator failures ─────────────────────────────────────────────────────

def test_fetcher_exception_falls_back_to_record_dump():
    router, fetcher, _ = _make_router([INCIDENT_RECORD])
    fetcher.fetch.side_effect = RuntimeError("browser crashed")

    answer = router.answer("Pipeline incident data")

    assert answer.match_method == MatchMethod.RECORD_MATCH
    assert BLOCKED_NOTE in answer.answer
    assert answer.sheet == "Pipelines"


def test_web_answer_exception_reports_not_found():
    router, _, web = _make_router([])
    web.search.side_effect = RuntimeError("search provider down")

    answer = router.answer("who is the president")

    assert answer.match_method == MatchMethod.FALLBACK
    assert answer.answer == NOT_FOUND_MESSAGE
    assert answer.source is None
